"""Command-line interface for whitecmd."""
