"""Emoji reactions on posts, replies and messages.

A reaction toggles: reacting again with the same emoji withdraws it, and
withdrawing the last reactor removes the whole entry. Every step is a
single conditional update, retried when a concurrent toggle changed the
entry between the read and the write.
"""

import logging
from typing import Any, Dict, Optional

import emoji

from ....config.constants import CUSTOM_EMOJI_PREFIX
from ....core.exceptions import NotFoundError, ValidationError
from ...store.entities import Collections, DocumentCollection, EntityStore

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


class ReactionService:
    """Shared toggle logic for anything carrying a ``reactions`` array."""

    def __init__(self, store: EntityStore):
        self.custom_emojis = store.collection(Collections.CUSTOM_EMOJIS)

    async def validate_emoji(self, value: str) -> None:
        if value.startswith(CUSTOM_EMOJI_PREFIX):
            emoji_id = value[len(CUSTOM_EMOJI_PREFIX):]
            if not emoji_id or not await self.custom_emojis.find_by_id(emoji_id):
                raise ValidationError("Invalid custom emoji.")
        elif not emoji.is_emoji(value):
            raise ValidationError("Invalid emoji.")

    async def toggle(
        self, collection: DocumentCollection, document_id: str, value: str, user_id: str
    ) -> Dict[str, Any]:
        """Toggle ``user_id``'s ``value`` reaction and return the updated document."""
        await self.validate_emoji(value)

        for _ in range(MAX_ATTEMPTS):
            document = await collection.find_by_id(document_id)
            if document is None:
                raise NotFoundError()
            updated = await self._apply(collection, document, value, user_id)
            if updated is not None:
                return updated
        logger.warning(f"Reaction toggle on {collection.name}/{document_id} kept racing")
        raise ValidationError("The reaction changed while updating, try again.")

    async def _apply(
        self, collection: DocumentCollection, document: Dict[str, Any], value: str, user_id: str
    ) -> Optional[Dict[str, Any]]:
        document_id = document["id"]
        entry = next((r for r in document.get("reactions", []) if r["emoji"] == value), None)

        if entry is None:
            return await collection.update_one(
                {"id": document_id, "reactions.emoji": {"$ne": value}},
                {"$push": {"reactions": {"emoji": value, "reactors": [user_id]}}},
            )

        if user_id not in entry["reactors"]:
            return await collection.update_one(
                {"id": document_id, "reactions": {"$elemMatch": {"emoji": value}}},
                {"$addToSet": {"reactions.$.reactors": user_id}},
            )

        if entry["reactors"] == [user_id]:
            # Sole reactor: drop the entry, but only if nobody joined meanwhile
            return await collection.update_one(
                {"id": document_id, "reactions": {"$elemMatch": {"emoji": value, "reactors": [user_id]}}},
                {"$pull": {"reactions": {"emoji": value, "reactors": [user_id]}}},
            )

        return await collection.update_one(
            {"id": document_id, "reactions": {"$elemMatch": {"emoji": value, "reactors": user_id}}},
            {"$pull": {"reactions.$.reactors": user_id}},
        )
