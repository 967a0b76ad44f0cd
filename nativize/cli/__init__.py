"""Command-line interface for Nativize."""
