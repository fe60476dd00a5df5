"""Slash commands exposed to drivers."""
