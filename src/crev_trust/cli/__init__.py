"""Command-line interface for crev-trust."""
