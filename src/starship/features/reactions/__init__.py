"""Reactions and custom emojis."""
