"""In-memory store implementations."""
