"""Tests for forums, posts and replies."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from starship.core.exceptions import BadSessionError, ForbiddenError, NotFoundError, ValidationError
from starship.features.forums.entities import ForumPost


@pytest_asyncio.fixture
async def forum_id(planet, add_component):
    return await add_component(planet, "forum", "Forum")


@pytest_asyncio.fixture
async def private_forum_id(private_planet, services, context_for, owner):
    updated = await services.planets.add_component(context_for(owner), private_planet.id, "forum", "Secret")
    return updated.components[-1]["component_id"]


class TestForumAccess:
    @pytest.mark.asyncio
    async def test_anonymous_reads_public_forum(self, services, context_for, forum_id):
        assert (await services.forums.get(context_for(), forum_id)).id == forum_id

    @pytest.mark.asyncio
    async def test_private_forum_is_hidden(self, services, context_for, private_forum_id, outsider, member):
        with pytest.raises(NotFoundError):
            await services.forums.get(context_for(), private_forum_id)
        with pytest.raises(NotFoundError):
            await services.forums.get(context_for(outsider), private_forum_id)
        assert await services.forums.get(context_for(member), private_forum_id)

    @pytest.mark.asyncio
    async def test_anonymous_cannot_post(self, services, context_for, forum_id):
        with pytest.raises(BadSessionError):
            await services.forum_posts.insert(context_for(), forum_id, "Hi", "there")


class TestPosts:
    @pytest.mark.asyncio
    async def test_public_write_allows_outsiders(self, services, context_for, forum_id, outsider):
        post = await services.forum_posts.insert(context_for(outsider), forum_id, "Hello", "first!")
        assert post.owner == outsider.id
        assert post.reply_count == 0

    @pytest.mark.asyncio
    async def test_title_required(self, services, context_for, forum_id, member):
        with pytest.raises(ValidationError):
            await services.forum_posts.insert(context_for(member), forum_id, "  ", "body")

    @pytest.mark.asyncio
    async def test_unknown_tag_is_dropped(self, services, context_for, forum_id, owner):
        context = context_for(owner)
        await services.forums.create_tag(context, forum_id, "news")
        tagged = await services.forum_posts.insert(context, forum_id, "A", "a", tag="news")
        untagged = await services.forum_posts.insert(context, forum_id, "B", "b", tag="rumours")
        assert tagged.tags == ["news"]
        assert untagged.tags == []

    @pytest.mark.asyncio
    async def test_author_or_moderator_edits(self, services, context_for, forum_id, outsider, make_user, owner):
        post = await services.forum_posts.insert(context_for(outsider), forum_id, "Mine", "v1")
        assert (await services.forum_posts.update(context_for(outsider), post.id, "v2")).content == "v2"
        stranger = await make_user("stranger")
        with pytest.raises(ForbiddenError):
            await services.forum_posts.update(context_for(stranger), post.id, "v3")
        assert (await services.forum_posts.update(context_for(owner), post.id, "v4")).content == "v4"

    @pytest.mark.asyncio
    async def test_banned_author_loses_edit_rights(self, services, context_for, forum_id, planet, member, owner):
        post = await services.forum_posts.insert(context_for(member), forum_id, "Mine", "v1")
        await services.planets.ban(context_for(owner), planet.id, member.id)

        with pytest.raises(ForbiddenError):
            await services.forum_posts.update(context_for(member), post.id, "v2")
        with pytest.raises(ForbiddenError):
            await services.forum_posts.delete(context_for(member), post.id)

    @pytest.mark.asyncio
    async def test_delete_removes_replies(self, services, context_for, forum_id, member):
        context = context_for(member)
        post = await services.forum_posts.insert(context, forum_id, "Bye", "")
        await services.forum_posts.insert_reply(context, post.id, "reply")
        assert await services.forum_posts.delete(context, post.id)
        assert await services.forum_posts.replies.count({"post_id": post.id}) == 0


class TestReplies:
    @pytest.mark.asyncio
    async def test_reply_count_follows_replies(self, services, context_for, forum_id, member, outsider):
        post = await services.forum_posts.insert(context_for(member), forum_id, "Thread", "")
        reply = await services.forum_posts.insert_reply(context_for(outsider), post.id, "one")
        await services.forum_posts.insert_reply(context_for(member), post.id, "two")
        assert (await services.forum_posts.get(context_for(), post.id)).reply_count == 2

        await services.forum_posts.delete_reply(context_for(outsider), reply.id)
        assert (await services.forum_posts.get(context_for(), post.id)).reply_count == 1
        replies = await services.forum_posts.replies_for(context_for(), post.id)
        assert [r.content for r in replies] == ["two"]

    @pytest.mark.asyncio
    async def test_locked_post_refuses_replies(self, services, context_for, forum_id, owner, outsider):
        post = await services.forum_posts.insert(context_for(outsider), forum_id, "Heated", "")
        with pytest.raises(ForbiddenError):
            await services.forum_posts.toggle_lock(context_for(outsider), post.id)
        assert (await services.forum_posts.toggle_lock(context_for(owner), post.id)).locked
        with pytest.raises(ForbiddenError):
            await services.forum_posts.insert_reply(context_for(outsider), post.id, "but")

    @pytest.mark.asyncio
    async def test_reply_mentions_notify(self, services, context_for, forum_id, member, outsider):
        post = await services.forum_posts.insert(context_for(member), forum_id, "Q", "")
        reply = await services.forum_posts.insert_reply(context_for(outsider), post.id, "@member see this")
        assert reply.mentions == [member.id]
        notifications = await services.notifications.list(context_for(member))
        assert len(notifications) == 1
        assert "outsider mentioned you" in notifications[0].text


class TestFeed:
    @pytest_asyncio.fixture
    async def posts(self, services, forum_id, planet, owner):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        created = []
        for n in range(5):
            created.append(await services.forums.posts.insert(
                ForumPost(
                    id=f"p{n}", component_id=forum_id, planet=planet.id, owner=owner.id, name=f"Post {n}",
                    reply_count=n % 3, stickied=n == 2,
                    created_at=base + timedelta(hours=n), updated_at=base + timedelta(hours=n),
                )
            ))
        return created

    @pytest.mark.asyncio
    async def test_feed_pages_and_skips_stickied(self, services, context_for, forum_id, posts):
        context = context_for()
        first = await services.forums.post_feed(context, forum_id, "newest", limit=2)
        second = await services.forums.post_feed(context, forum_id, "newest", cursor=first.cursor, limit=2)
        done = await services.forums.post_feed(context, forum_id, "newest", cursor=second.cursor, limit=2)

        assert [p.id for p in first.posts] == ["p4", "p3"]
        assert [p.id for p in second.posts] == ["p1", "p0"]
        assert done.posts == []
        assert done.cursor == second.cursor

    @pytest.mark.asyncio
    async def test_stickied_listed_separately(self, services, context_for, forum_id, posts):
        assert [p.id for p in await services.forums.stickied_posts(context_for(), forum_id)] == ["p2"]

    @pytest.mark.asyncio
    async def test_oldest_first(self, services, context_for, forum_id, posts):
        feed = await services.forums.post_feed(context_for(), forum_id, "oldest", limit=10)
        assert [p.id for p in feed.posts] == ["p0", "p1", "p3", "p4"]

    @pytest.mark.asyncio
    async def test_invalid_sort_and_cursor(self, services, context_for, forum_id, posts):
        with pytest.raises(ValidationError):
            await services.forums.post_feed(context_for(), forum_id, "loudest")
        with pytest.raises(ValidationError):
            await services.forums.post_feed(context_for(), forum_id, "newest", cursor="page-2")

    @pytest.mark.asyncio
    async def test_tag_filter(self, services, context_for, forum_id, posts, owner):
        await services.forums.create_tag(context_for(owner), forum_id, "news")
        await services.forums.posts.update_by_id("p1", {"$push": {"tags": "news"}})
        feed = await services.forums.post_feed(context_for(), forum_id, tag="news")
        assert [p.id for p in feed.posts] == ["p1"]


class TestTags:
    @pytest.mark.asyncio
    async def test_duplicate_tag(self, services, context_for, forum_id, owner):
        context = context_for(owner)
        assert (await services.forums.create_tag(context, forum_id, "help")).tags == ["help"]
        with pytest.raises(ValidationError):
            await services.forums.create_tag(context, forum_id, "help")
        assert (await services.forums.remove_tag(context, forum_id, "help")).tags == []

    @pytest.mark.asyncio
    async def test_tags_need_full_write(self, services, context_for, forum_id, outsider):
        with pytest.raises(ForbiddenError):
            await services.forums.create_tag(context_for(outsider), forum_id, "spam")


class TestPrivacyScenario:
    @pytest.mark.asyncio
    async def test_anonymous_read_follows_planet_privacy(self, services, context_for, forum_id, planet, owner, member):
        post = await services.forum_posts.insert(context_for(member), forum_id, "Public", "visible")
        assert (await services.forum_posts.get(context_for(), post.id)).content == "visible"

        await services.planets.toggle_private(context_for(owner), planet.id)

        with pytest.raises(NotFoundError):
            await services.forum_posts.get(context_for(), post.id)
        assert (await services.forum_posts.get(context_for(member), post.id)).content == "visible"
