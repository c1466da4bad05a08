"""create-quapp project scaffolding."""
