"""Counting backends."""
