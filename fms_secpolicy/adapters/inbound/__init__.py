"""Inbound adapters - CLI and Lambda entry points."""
