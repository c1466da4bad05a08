"""Help text for both CLIs, written as rich markup."""

from rich.text import Text

from quapp.constants import ALL_TEMPLATES

DEV_HELP = """
[bold blue]quapp[/bold blue] - Quapp development CLI

[bold]Usage:[/bold]
  quapp <command> \\[options]

[bold]Commands:[/bold]
  serve               Start development server with LAN access
  build               Build for production and create .qpp package
  init                Initialize Quapp in an existing project

[bold]Global Options:[/bold]
  --no-color          Disable colored output
  --json              Output result as JSON (for automation/AI)
  --verbose           Show detailed logs
  -v, --version       Show version number
  -h, --help          Show this help message

[bold]Serve Options:[/bold]
  -p, --port <port>   Port to run server on (default: 5173)
  --host <host>       Host to bind to (default: auto-detected LAN IP)
  --no-qr             Disable QR code display
  --open              Open browser automatically
  --https             Enable HTTPS
  -- <args...>        Forward remaining arguments to Vite

[bold]Build Options:[/bold]
  -o, --output <file> Output file name (default: dist.qpp)
  --no-clean          Keep dist folder after compression
  --skip-prompts      Skip interactive prompts (use package.json as-is)

[bold]Init Options:[/bold]
  -y, --yes           Skip confirmation prompt
  -f, --force         Overwrite existing config/scripts
  --dry-run           Preview changes without applying

[bold]Examples:[/bold]
  [cyan]# Initialize Quapp in existing project[/cyan]
  quapp init

  [cyan]# Initialize without prompts (AI-friendly)[/cyan]
  quapp init --yes --json

  [cyan]# Start dev server on a specific port[/cyan]
  quapp serve --port 3000

  [cyan]# Build to custom output (AI-friendly)[/cyan]
  quapp build -o myapp.qpp --json --skip-prompts

[bold]Configuration:[/bold]
  Create quapp.config.json in your project root to customize defaults:

  {
    "server": { "port": 5173, "qr": true, "network": "private", "openBrowser": false },
    "build": { "outDir": "dist", "outputFile": "dist.qpp" }
  }

[bold]Exit codes:[/bold]
  0 success, 1 error, 2 invalid arguments, 3 build failed,
  4 configuration error, 5 missing dependency, 130 cancelled
"""

CREATE_HELP = f"""
[bold blue]create-quapp[/bold blue] - Scaffold a new Quapp project

[bold]Usage:[/bold]
  create-quapp \\[project-name] \\[options]

[bold]Arguments:[/bold]
  project-name             Name of the project directory to create

[bold]Options:[/bold]
  -t, --template <name>    Template to use ({", ".join(ALL_TEMPLATES[:4])}, ...)
  -a, --author <name>      Author name (for package.json and manifest)
  -d, --description <text> Project description
  -f, --force              Overwrite existing directory
  -g, --git                Initialize a git repository
  --no-git                 Skip git initialization
  -i, --install            Install dependencies after scaffolding
  --no-install             Skip dependency installation
  -y, --yes                Skip prompts and use defaults
  --dry-run                Preview what would be created (no changes made)
  --pm <manager>           Package manager (npm, yarn, pnpm, bun)
  --no-color               Disable colored output
  --json                   Output as JSON (for AI/automation)
  --verbose                Show detailed logs
  -v, --version            Show version
  -h, --help               Show help

[bold]Available Templates:[/bold]
  react                    React with JavaScript
  react-ts                 React with TypeScript
  react+swc                React with JavaScript + SWC
  react-ts+swc             React with TypeScript + SWC
  vue                      Vue with JavaScript
  vue-ts                   Vue with TypeScript
  vanilla-js               Vanilla JavaScript
  vanilla-ts               Vanilla TypeScript
  solid-js                 Solid.js with JavaScript
  solid-ts                 Solid.js with TypeScript

[bold]Examples:[/bold]
  [cyan]# Interactive mode[/cyan]
  create-quapp

  [cyan]# Create React TypeScript project[/cyan]
  create-quapp my-app --template react-ts

  [cyan]# Full automation (AI-friendly)[/cyan]
  create-quapp my-app -t react-ts --git --install --yes --json
"""


def plain(markup: str) -> str:
    """Strip rich markup, for JSON documents."""
    return Text.from_markup(markup).plain.strip("\n")
