"""Tests for channels, messages and their subscriptions."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from starship.config.constants import ChannelType
from starship.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from starship.features.chats.entities import Attachment, Message
from starship.features.events import MemoryEventTransport, RedisEventTransport
from starship.features.store.repositories.base import generate_id


@pytest_asyncio.fixture
async def channel(services, context_for, planet, owner, member, add_component):
    """Text channel on ``planet`` that owner and member both follow."""
    chat_id = await add_component(planet, "chat", "Chat")
    created = await services.channels.create(context_for(owner), chat_id, "general")
    await services.planets.follow(context_for(owner), planet.id)
    await services.planets.follow(context_for(member), planet.id)
    return created


@pytest_asyncio.fixture
async def direct_channel(services, context_for, owner, member):
    return await services.channels.create_direct_message(context_for(owner), [member.id])


async def _start(gen):
    task = asyncio.create_task(gen.__anext__())
    for _ in range(3):
        await asyncio.sleep(0)
    return task


class TestSend:
    @pytest.mark.asyncio
    async def test_send_in_followed_planet(self, services, context_for, channel, member):
        message = await services.messages.send(context_for(member), channel.id, "hello")

        assert message.channel == channel.id
        assert message.planet == channel.planet
        assert message.component_id == channel.component_id

    @pytest.mark.asyncio
    async def test_must_follow_the_planet(self, services, context_for, channel, outsider):
        with pytest.raises(ForbiddenError):
            await services.messages.send(context_for(outsider), channel.id, "hi")

    @pytest.mark.asyncio
    async def test_length_limit(self, services, context_for, channel, member):
        with pytest.raises(ValidationError):
            await services.messages.send(context_for(member), channel.id, "x" * 2001)
        assert await services.messages.send(context_for(member), channel.id, "x" * 2000)

    @pytest.mark.asyncio
    async def test_empty_message(self, services, context_for, channel, member):
        with pytest.raises(ValidationError):
            await services.messages.send(context_for(member), channel.id, "   ")

    @pytest.mark.asyncio
    async def test_attachments_must_exist(self, services, context_for, channel, member):
        with pytest.raises(ValidationError):
            await services.messages.send(context_for(member), channel.id, "look", attachments=["nope"])

    @pytest.mark.asyncio
    async def test_at_most_five_attachments(self, services, context_for, channel, member):
        ids = []
        for n in range(6):
            attachment = await services.messages.attachments.insert(
                Attachment(id=generate_id(), name=f"a{n}.png", type="image/png", url="https://cdn.test/a")
            )
            ids.append(attachment.id)

        with pytest.raises(ValidationError):
            await services.messages.send(context_for(member), channel.id, "", attachments=ids)
        message = await services.messages.send(context_for(member), channel.id, "", attachments=ids[:5])
        assert message.attachments == ids[:5]

    @pytest.mark.asyncio
    async def test_reply_target_must_exist(self, services, context_for, channel, member):
        with pytest.raises(ValidationError):
            await services.messages.send(context_for(member), channel.id, "re", reply_to="ghost")
        first = await services.messages.send(context_for(member), channel.id, "first")
        reply = await services.messages.send(context_for(member), channel.id, "re", reply_to=first.id)
        assert reply.reply_to == first.id

    @pytest.mark.asyncio
    async def test_mentions_are_recorded(self, services, context_for, channel, owner, member):
        message = await services.messages.send(context_for(member), channel.id, "ping @owner")
        assert message.mentions == [owner.id]


class TestEditAndModerate:
    @pytest.mark.asyncio
    async def test_author_edits(self, services, context_for, channel, member):
        message = await services.messages.send(context_for(member), channel.id, "typo")
        edited = await services.messages.edit(context_for(member), message.id, "fixed")
        assert edited.content == "fixed"
        assert edited.edited

    @pytest.mark.asyncio
    async def test_others_need_full_write(self, services, context_for, channel, member, outsider, owner):
        message = await services.messages.send(context_for(member), channel.id, "mine")
        with pytest.raises(ForbiddenError):
            await services.messages.edit(context_for(outsider), message.id, "theirs")
        assert await services.messages.delete(context_for(owner), message.id)
        with pytest.raises(NotFoundError):
            await services.messages.get(context_for(owner), message.id)

    @pytest.mark.asyncio
    async def test_banned_author_loses_edit_rights(self, services, context_for, channel, planet, member, owner):
        message = await services.messages.send(context_for(member), channel.id, "before the ban")
        await services.planets.ban(context_for(owner), planet.id, member.id)

        with pytest.raises(ForbiddenError):
            await services.messages.edit(context_for(member), message.id, "after the ban")
        with pytest.raises(ForbiddenError):
            await services.messages.delete(context_for(member), message.id)
        assert (await services.messages.get(context_for(owner), message.id)).content == "before the ban"

    @pytest.mark.asyncio
    async def test_only_the_author_edits_direct_messages(self, services, context_for, direct_channel, owner, member):
        message = await services.messages.send(context_for(member), direct_channel.id, "psst")
        with pytest.raises(NotFoundError):
            await services.messages.edit(context_for(owner), message.id, "changed")
        assert (await services.messages.edit(context_for(member), message.id, "edited")).content == "edited"

    @pytest.mark.asyncio
    async def test_pin_requires_moderation(self, services, context_for, channel, member, outsider, owner):
        message = await services.messages.send(context_for(member), channel.id, "pin me")
        with pytest.raises(ForbiddenError):
            await services.messages.set_pinned(context_for(outsider), message.id, True)
        assert (await services.messages.set_pinned(context_for(owner), message.id, True)).pinned
        feed = await services.channels.pinned_feed(context_for(outsider), channel.id)
        assert [m.id for m in feed.messages] == [message.id]

    @pytest.mark.asyncio
    async def test_react_toggles(self, services, context_for, channel, member):
        message = await services.messages.send(context_for(member), channel.id, "nice")
        reacted = await services.messages.react(context_for(member), message.id, "👍")
        assert reacted.reactions == [{"emoji": "👍", "reactors": [member.id]}]
        assert (await services.messages.react(context_for(member), message.id, "👍")).reactions == []


class TestFeed:
    @pytest.mark.asyncio
    async def test_newest_first_with_cursor(self, services, context_for, channel, member):
        base = datetime(2024, 5, 1, tzinfo=timezone.utc)
        for n in range(5):
            await services.messages.messages.insert(
                Message(
                    id=f"m{n}", channel=channel.id, owner=member.id, content=str(n),
                    planet=channel.planet, created_at=base + timedelta(seconds=n),
                )
            )
        context = context_for(member)

        first = await services.channels.message_feed(context, channel.id, limit=2)
        second = await services.channels.message_feed(context, channel.id, limit=2, cursor=first.cursor)
        last = await services.channels.message_feed(context, channel.id, limit=2, cursor=second.cursor)

        assert [m.id for m in first.messages] == ["m4", "m3"]
        assert [m.id for m in second.messages] == ["m2", "m1"]
        assert [m.id for m in last.messages] == ["m0"]

    @pytest.mark.asyncio
    async def test_bad_cursor(self, services, context_for, channel, member):
        with pytest.raises(ValidationError):
            await services.channels.message_feed(context_for(member), channel.id, cursor="yesterday")

    @pytest.mark.asyncio
    async def test_private_planet_feed_is_hidden(self, services, context_for, channel, outsider, owner):
        await services.planets.toggle_private(context_for(owner), channel.planet)
        with pytest.raises(NotFoundError):
            await services.channels.message_feed(context_for(outsider), channel.id)


class TestChannels:
    @pytest.mark.asyncio
    async def test_channels_of_chat(self, services, context_for, channel, outsider):
        channels = await services.chats.channels_of(context_for(outsider), channel.component_id)
        assert [c.id for c in channels] == [channel.id]

    @pytest.mark.asyncio
    async def test_topic_and_rename_need_full_write(self, services, context_for, channel, owner, outsider):
        with pytest.raises(ForbiddenError):
            await services.channels.set_topic(context_for(outsider), channel.id, "spam")
        assert (await services.channels.set_topic(context_for(owner), channel.id, "news")).topic == "news"
        assert (await services.channels.rename(context_for(owner), channel.id, "main")).name == "main"

    @pytest.mark.asyncio
    async def test_delete_removes_messages(self, services, context_for, channel, owner, member):
        await services.messages.send(context_for(member), channel.id, "bye")
        assert await services.channels.delete(context_for(owner), channel.id)
        assert await services.messages.messages.count({"channel": channel.id}) == 0


class TestDirectMessages:
    @pytest.mark.asyncio
    async def test_participants_only(self, services, context_for, direct_channel, owner, member, outsider):
        assert direct_channel.type == ChannelType.DIRECT_MESSAGE
        assert direct_channel.name == "owner, member"
        message = await services.messages.send(context_for(member), direct_channel.id, "psst")
        assert message.planet is None
        with pytest.raises(NotFoundError):
            await services.messages.send(context_for(outsider), direct_channel.id, "hey")
        with pytest.raises(NotFoundError):
            await services.channels.get(context_for(outsider), direct_channel.id)

    @pytest.mark.asyncio
    async def test_listed_for_both_sides(self, services, context_for, direct_channel, owner, member):
        assert [c.id for c in await services.channels.direct_messages(context_for(member))] == [direct_channel.id]
        assert [c.id for c in await services.channels.direct_messages(context_for(owner))] == [direct_channel.id]

    @pytest.mark.asyncio
    async def test_blocked_creator_cannot_open(self, services, context_for, owner, member):
        await services.users.block(context_for(member), owner.id)
        with pytest.raises(NotFoundError):
            await services.channels.create_direct_message(context_for(owner), [member.id])

    @pytest.mark.asyncio
    async def test_needs_someone_else(self, services, context_for, owner):
        with pytest.raises(ValidationError):
            await services.channels.create_direct_message(context_for(owner), [owner.id])

    @pytest.mark.asyncio
    async def test_cannot_delete_direct_message(self, services, context_for, direct_channel, owner):
        with pytest.raises(NotFoundError):
            await services.channels.delete(context_for(owner), direct_channel.id)


class TestSubscriptions:
    @pytest.fixture(params=["memory", "redis"])
    def transport(self, request, settings, fake_redis):
        """Every subscription test runs on both event transports."""
        if request.param == "redis":
            return RedisEventTransport("redis://unused", client=fake_redis)
        return MemoryEventTransport(settings.subscriber_queue_size)

    @pytest.mark.asyncio
    async def test_receives_messages_of_its_channel(self, services, context_for, channel, member, owner):
        gen = services.messages.message_received(context_for(owner), channel.id)
        task = await _start(gen)

        sent = await services.messages.send(context_for(member), channel.id, "live")

        received = await asyncio.wait_for(task, 1)
        assert received.id == sent.id
        await gen.aclose()

    @pytest.mark.asyncio
    async def test_hidden_channel_refuses_subscription(self, services, context_for, direct_channel, outsider):
        gen = services.messages.message_received(context_for(outsider), direct_channel.id)
        with pytest.raises(NotFoundError):
            await gen.__anext__()

    @pytest.mark.asyncio
    async def test_revoked_member_stops_receiving(self, services, context_for, channel, owner, member):
        await services.planets.toggle_private(context_for(owner), channel.planet)
        gen = services.messages.message_received(context_for(member), channel.id)
        task = await _start(gen)

        await services.planets.remove_member(context_for(owner), channel.planet, member.id)
        await services.messages.send(context_for(owner), channel.id, "secret")
        await asyncio.sleep(0.05)
        assert not task.done()

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        await gen.aclose()

    @pytest.mark.asyncio
    async def test_edit_and_remove_events(self, services, context_for, channel, member):
        context = context_for(member)
        message = await services.messages.send(context, channel.id, "draft")
        updated_gen = services.messages.message_updated(context, channel.id)
        removed_gen = services.messages.message_removed(context, channel.id)
        updated_task, removed_task = await _start(updated_gen), await _start(removed_gen)

        await services.messages.edit(context, message.id, "final")
        await services.messages.delete(context, message.id)

        assert (await asyncio.wait_for(updated_task, 1)).content == "final"
        assert (await asyncio.wait_for(removed_task, 1)).id == message.id
        await updated_gen.aclose()
        await removed_gen.aclose()
