"""Real-time messaging, presence and call signaling core."""
