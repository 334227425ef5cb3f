"""Command-line interface for nasbridge."""
