"""Command-line interface for codenav."""
