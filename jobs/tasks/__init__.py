"""Dramatiq actors."""
