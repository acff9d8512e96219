"""Inspection HTTP API."""
