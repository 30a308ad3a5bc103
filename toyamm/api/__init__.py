"""HTTP API for the pool."""
