"""Command line interface for sfind."""
