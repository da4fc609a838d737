from .planet import Invite, Planet

__all__ = ["Invite", "Planet"]
