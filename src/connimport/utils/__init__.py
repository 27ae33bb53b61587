"""Utility modules for connimport."""
