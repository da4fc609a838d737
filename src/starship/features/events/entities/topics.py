"""Event topics."""


class Topics:
    MESSAGE_RECEIVED = "MESSAGE_RECEIVED"
    MESSAGE_UPDATED = "MESSAGE_UPDATED"
    MESSAGE_REMOVED = "MESSAGE_REMOVED"
    NOTIFICATION_RECEIVED = "NOTIFICATION_RECEIVED"
