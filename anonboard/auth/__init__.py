"""Authentication: bearer token verification and access policy."""
