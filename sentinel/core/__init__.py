"""Configuration, logging, errors and shared schemas."""
