"""Handlers for the quapp dev tool commands."""

from quapp.commands.build import run_build
from quapp.commands.init import run_init
from quapp.commands.serve import run_serve

__all__ = ["run_build", "run_init", "run_serve"]
