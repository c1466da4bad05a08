"""quapp - Quapp project scaffolding and development CLI

Philosophy:
- Ruthless simplicity
- One parser, two grammars
- Machine-readable results for automation (--json)
- Fail fast with helpful guidance

Two commands ship from this package: ``create-quapp`` scaffolds a new
project from a framework template, and ``quapp`` runs the dev server and
packages production builds into ``.qpp`` archives.
"""

__version__ = "1.1.0"
__all__ = ["__version__"]
