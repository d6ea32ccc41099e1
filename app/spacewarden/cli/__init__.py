"""Command-line interface for spacewarden."""
