"""Bridges from filesystem watchers to reactors."""
