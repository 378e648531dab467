"""Packaged policy configs."""
