"""Core types, constants and errors shared across the package."""
