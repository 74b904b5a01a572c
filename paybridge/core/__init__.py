"""Configuration, errors and logging."""
