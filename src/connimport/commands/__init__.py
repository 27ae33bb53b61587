"""Command modules for connimport CLI."""
