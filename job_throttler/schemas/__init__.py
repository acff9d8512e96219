"""Quota and verdict models."""
