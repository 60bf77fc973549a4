"""Command groups of the taskflow CLI."""
