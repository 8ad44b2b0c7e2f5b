"""Logging setup for podlogkeeper."""
