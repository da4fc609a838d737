from .event_bus import EventBus, Predicate

__all__ = ["EventBus", "Predicate"]
