"""Command-line interface for prodgrid."""
