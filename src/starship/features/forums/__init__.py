"""Forum component."""
