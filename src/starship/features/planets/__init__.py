"""Planets: the unit of ownership and access control."""
