"""Anonymous community board service."""
