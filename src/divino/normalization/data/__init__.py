"""Packaged normalization dictionaries."""
