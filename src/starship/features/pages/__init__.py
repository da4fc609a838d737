"""Page component."""
