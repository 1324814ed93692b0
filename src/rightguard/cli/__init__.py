"""Command-line entrypoints for Right Guard."""
