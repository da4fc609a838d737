from .invite_service import InviteService
from .planet_service import PlanetService

__all__ = ["InviteService", "PlanetService"]
