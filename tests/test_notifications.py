"""Tests for notifications and @mention delivery."""

import asyncio

import pytest

from starship.config.constants import MentionSetting
from starship.core.exceptions import NotFoundError
from starship.features.notifications.services.mention_service import extract_usernames, wants_notification


class TestMentionRules:
    def test_extract_usernames_dedupes(self):
        assert extract_usernames("@ann and @bob.smith, again @ann") == ["ann", "bob.smith"]

    @pytest.mark.asyncio
    async def test_settings(self, planet, make_user, owner):
        everyone = await make_user("everyone")
        quiet = await make_user("quiet", mention_setting=int(MentionSetting.NONE))
        members_only = await make_user("members", mention_setting=int(MentionSetting.MEMBERS_ONLY))
        direct_only = await make_user("direct", mention_setting=int(MentionSetting.MESSAGES_ONLY))
        follower = await make_user("follower", mention_setting=int(MentionSetting.FOLLOWING), following=[planet.id])

        assert wants_notification(everyone, owner.id, planet)
        assert not wants_notification(quiet, owner.id, None)
        assert not wants_notification(members_only, owner.id, planet)
        assert wants_notification(members_only, owner.id, None)
        assert not wants_notification(direct_only, owner.id, planet)
        assert wants_notification(direct_only, owner.id, None)
        assert wants_notification(follower, owner.id, planet)

    @pytest.mark.asyncio
    async def test_blocked_author(self, planet, make_user, owner):
        blocker = await make_user("blocker", blocked=[owner.id])
        assert not wants_notification(blocker, owner.id, planet)


class TestMentionService:
    @pytest.mark.asyncio
    async def test_notifies_mentioned_users_except_author(self, services, context_for, owner, member):
        mentioned = await services.mentions.process("@owner @member @ghost", owner.id, "owner", "a chat")

        assert set(mentioned) == {owner.id, member.id}
        assert await services.notifications.list(context_for(owner)) == []
        [notification] = await services.notifications.list(context_for(member))
        assert notification.text == "owner mentioned you in a chat."

    @pytest.mark.asyncio
    async def test_no_mentions(self, services, owner):
        assert await services.mentions.process("hello", owner.id, "owner", "a chat") == []


class TestNotificationService:
    @pytest.mark.asyncio
    async def test_list_read_and_clear(self, services, context_for, member):
        first = await services.notifications.create(member.id, "one")
        await services.notifications.create(member.id, "two")
        context = context_for(member)

        assert await services.notifications.mark_all_read(context) == 2
        assert all(n.is_read for n in await services.notifications.list(context))
        assert await services.notifications.clear(context, first.id)
        assert await services.notifications.clear_all(context) == 1
        assert await services.notifications.list(context) == []

    @pytest.mark.asyncio
    async def test_cannot_read_someone_elses(self, services, context_for, member, outsider):
        notification = await services.notifications.create(member.id, "private")
        with pytest.raises(NotFoundError):
            await services.notifications.get(context_for(outsider), notification.id)

    @pytest.mark.asyncio
    async def test_subscription_only_delivers_own(self, services, context_for, member, outsider):
        gen = services.notifications.subscribe(context_for(member))
        task = asyncio.create_task(gen.__anext__())
        for _ in range(3):
            await asyncio.sleep(0)

        await services.notifications.create(outsider.id, "not yours")
        await services.notifications.create(member.id, "yours")

        delivered = await asyncio.wait_for(task, 1)
        assert delivered.text == "yours"
        await gen.aclose()
