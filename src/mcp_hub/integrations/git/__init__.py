"""Git executable integration."""
