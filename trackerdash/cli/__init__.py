"""Command line interface for trackerdash."""
