"""Console entry points.

    quapp [serve|build|init] [options]     (dev server and .qpp packaging)
    create-quapp [project-name] [options]  (project scaffolding)

Run either with ``--help`` for the full option list, or ``--json`` for a
single machine-readable result document on stdout.
"""

from quapp.click_command import RawArgsCommand
from quapp.runner import CREATE_TOOL, DEV_TOOL

main = RawArgsCommand(
    DEV_TOOL,
    tool=DEV_TOOL,
    help="Development and build tools for Quapp projects.",
)

create_main = RawArgsCommand(
    CREATE_TOOL,
    tool=CREATE_TOOL,
    help="Scaffold a new Quapp project.",
)


if __name__ == "__main__":
    main()
