"""Command line interface for nest."""
