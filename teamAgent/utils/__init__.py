"""Shared helpers: logging, errors, prompt rendering and JSON extraction."""
