"""Utilities for KeyLeaks."""
