"""Command-line entry points for Scry."""
