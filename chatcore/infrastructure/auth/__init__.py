"""Token verification providers."""
