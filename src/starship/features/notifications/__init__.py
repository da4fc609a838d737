"""Notifications and mentions."""
