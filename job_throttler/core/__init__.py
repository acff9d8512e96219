"""Configuration, errors, logging and HTTP wiring."""
