"""KeyLeaks command-line interface."""
