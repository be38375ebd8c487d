"""Command groups for the bz CLI."""
