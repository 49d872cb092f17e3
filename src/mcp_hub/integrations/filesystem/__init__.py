"""Packages/ directory integration."""
