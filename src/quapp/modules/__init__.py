"""Shared helpers for talking to the user and to external tools."""
