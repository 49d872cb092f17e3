"""Host package manager integration."""
