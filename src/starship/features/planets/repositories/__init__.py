from .planet_repository import InviteRepository, PlanetRepository

__all__ = ["InviteRepository", "PlanetRepository"]
