"""Clock integration."""
