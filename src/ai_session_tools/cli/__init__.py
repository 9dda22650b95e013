"""Command-line entry points for AI Session Tools."""
