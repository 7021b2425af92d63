"""Quiz platform HTTP API."""
