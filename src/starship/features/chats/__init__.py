"""Chat components: channels, direct messages and live messages."""
