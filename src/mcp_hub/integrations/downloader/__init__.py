"""HTTP download integration."""
