"""Backlog API adapters."""
