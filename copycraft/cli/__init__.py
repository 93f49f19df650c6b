"""Command line interface for copycraft."""
