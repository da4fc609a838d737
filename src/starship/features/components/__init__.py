"""Planet components and their shared access rules."""
