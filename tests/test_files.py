"""Tests for the file lifecycle, quota accounting and folder moves."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from starship.core.exceptions import ForbiddenError, NotFoundError, StorageError, ValidationError
from starship.features.files.services import StorageCleanup


@pytest_asyncio.fixture
async def files_id(planet, add_component):
    return await add_component(planet, "files", "Files")


@pytest.fixture
def upload(services, storage):
    """Upload ``data`` as ``name`` and confirm it."""
    async def factory(context, files_id, name, data=b"0123456789", folder="root"):
        grant = await services.file_objects.upload(context, folder, name, "text/plain", files_id)
        storage.objects[grant.object.key] = data
        return await services.file_objects.complete_upload(context, grant.object.id)
    return factory


async def _used_bytes(services, user):
    return (await services.users.user_repository.get(user.id)).used_bytes


class TestUploadLifecycle:
    @pytest.mark.asyncio
    async def test_upload_starts_pending(self, services, context_for, owner, files_id):
        grant = await services.file_objects.upload(context_for(owner), "root", "a/b.txt", "text/plain", files_id)

        assert grant.object.name == "a-b.txt"
        assert not grant.object.finished_uploading
        assert grant.object.path == ["root"]
        assert grant.upload_url.startswith("https://bucket.test/upload/")
        assert await services.file_objects.list_files(context_for(owner), files_id) == []

    @pytest.mark.asyncio
    async def test_complete_charges_quota_once(self, services, context_for, owner, files_id, upload):
        context = context_for(owner)
        uploaded = await upload(context, files_id, "notes.txt")

        assert uploaded.finished_uploading
        assert uploaded.size == 10
        assert await _used_bytes(services, owner) == 10
        with pytest.raises(ValidationError):
            await services.file_objects.complete_upload(context, uploaded.id)
        assert await _used_bytes(services, owner) == 10

    @pytest.mark.asyncio
    async def test_complete_requires_the_stored_object(self, services, context_for, owner, files_id):
        context = context_for(owner)
        grant = await services.file_objects.upload(context, "root", "ghost.txt", "text/plain", files_id)
        with pytest.raises(NotFoundError):
            await services.file_objects.complete_upload(context, grant.object.id)
        assert await _used_bytes(services, owner) == 0

    @pytest.mark.asyncio
    async def test_only_the_uploader_completes(self, services, context_for, owner, member, files_id, storage):
        grant = await services.file_objects.upload(context_for(owner), "root", "x.txt", "text/plain", files_id)
        storage.objects[grant.object.key] = b"x"
        with pytest.raises(NotFoundError):
            await services.file_objects.complete_upload(context_for(member), grant.object.id)

    @pytest.mark.asyncio
    async def test_cancel_pending_upload(self, services, context_for, owner, member, files_id, storage):
        grant = await services.file_objects.upload(context_for(owner), "root", "x.txt", "text/plain", files_id)

        with pytest.raises(NotFoundError):
            await services.file_objects.cancel_upload(context_for(member), grant.object.id)
        assert await services.file_objects.cancel_upload(context_for(owner), grant.object.id)
        await services.cleanup.wait()

        assert await services.file_objects.objects.get(grant.object.id) is None
        assert storage.deleted == [grant.object.key]

    @pytest.mark.asyncio
    async def test_cannot_cancel_finished_upload(self, services, context_for, owner, files_id, upload):
        uploaded = await upload(context_for(owner), files_id, "done.txt")
        with pytest.raises(NotFoundError):
            await services.file_objects.cancel_upload(context_for(owner), uploaded.id)

    @pytest.mark.asyncio
    async def test_cap_blocks_new_uploads(self, services, context_for, owner, files_id, upload):
        await upload(context_for(owner), files_id, "big.bin", data=b"x" * 1001)
        with pytest.raises(ForbiddenError):
            await services.file_objects.upload(context_for(owner), "root", "more.bin", "text/plain", files_id)

    @pytest.mark.asyncio
    async def test_waived_cap(self, services, context_for, make_user, planet, files_id, upload):
        waived = await make_user("hoarder", cap_waived=True, used_bytes=5000)
        await services.planets.planet_repository.update_by_id(planet.id, {"$addToSet": {"members": waived.id}})
        uploaded = await upload(context_for(waived), files_id, "more.bin")
        assert uploaded.finished_uploading

    @pytest.mark.asyncio
    async def test_outsider_cannot_upload(self, services, context_for, outsider, files_id):
        with pytest.raises(ForbiddenError):
            await services.file_objects.upload(context_for(outsider), "root", "x.txt", "text/plain", files_id)


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_refunds_once(self, services, context_for, owner, files_id, upload, storage):
        context = context_for(owner)
        uploaded = await upload(context, files_id, "notes.txt")

        assert await services.file_objects.delete(context, uploaded.id)
        with pytest.raises(NotFoundError):
            await services.file_objects.delete(context, uploaded.id)
        await services.cleanup.wait()

        assert await _used_bytes(services, owner) == 0
        assert uploaded.key in storage.deleted

    @pytest.mark.asyncio
    async def test_folder_delete_takes_subtree(self, services, context_for, owner, member, files_id, upload):
        folder = await services.file_objects.create_folder(context_for(owner), files_id, "root", "docs")
        await upload(context_for(owner), files_id, "a.txt", folder=folder.id)
        await upload(context_for(member), files_id, "b.txt", data=b"xyz", folder=folder.id)

        await services.file_objects.delete(context_for(owner), folder.id)
        await services.cleanup.wait()

        assert await services.file_objects.objects.count({"component_id": files_id}) == 0
        assert await _used_bytes(services, owner) == 0
        assert await _used_bytes(services, member) == 0

    @pytest.mark.asyncio
    async def test_component_removal_refunds(self, services, context_for, owner, planet, files_id, upload):
        await upload(context_for(owner), files_id, "a.txt")
        await services.planets.remove_component(context_for(owner), planet.id, files_id)
        await services.cleanup.wait()
        assert await _used_bytes(services, owner) == 0


class TestFolders:
    @pytest_asyncio.fixture
    async def tree(self, services, context_for, owner, files_id, upload):
        context = context_for(owner)
        a = await services.file_objects.create_folder(context, files_id, "root", "A")
        b = await services.file_objects.create_folder(context, files_id, "root", "B")
        c = await services.file_objects.create_folder(context, files_id, a.id, "C")
        deep = await upload(context, files_id, "deep.txt", folder=c.id)
        return a, b, c, deep

    @pytest.mark.asyncio
    async def test_paths(self, tree):
        a, b, c, deep = tree
        assert c.path == ["root", a.id]
        assert c.parent == a.id
        assert deep.path == ["root", a.id, c.id]

    @pytest.mark.asyncio
    async def test_move_rewrites_descendants(self, services, context_for, owner, tree):
        a, b, c, deep = tree

        moved = await services.file_objects.move(context_for(owner), [a.id], b.id)

        assert moved[0].path == ["root", b.id]
        assert moved[0].parent == b.id
        assert (await services.file_objects.objects.get(c.id)).path == ["root", b.id, a.id]
        assert (await services.file_objects.objects.get(deep.id)).path == ["root", b.id, a.id, c.id]

    @pytest.mark.asyncio
    async def test_move_back_to_root(self, services, context_for, owner, tree):
        a, b, c, deep = tree
        await services.file_objects.move(context_for(owner), [c.id], "root")
        assert (await services.file_objects.objects.get(deep.id)).path == ["root", c.id]

    @pytest.mark.asyncio
    async def test_move_into_itself(self, services, context_for, owner, tree):
        a, b, c, deep = tree
        with pytest.raises(ValidationError):
            await services.file_objects.move(context_for(owner), [a.id], a.id)
        with pytest.raises(ValidationError):
            await services.file_objects.move(context_for(owner), [a.id], c.id)
        assert (await services.file_objects.objects.get(c.id)).path == ["root", a.id]

    @pytest.mark.asyncio
    async def test_move_with_containing_folder(self, services, context_for, owner, tree):
        a, b, c, deep = tree
        with pytest.raises(ValidationError):
            await services.file_objects.move(context_for(owner), [a.id, deep.id], b.id)

    @pytest.mark.asyncio
    async def test_move_into_file(self, services, context_for, owner, tree):
        a, b, c, deep = tree
        with pytest.raises(ValidationError):
            await services.file_objects.move(context_for(owner), [b.id], deep.id)

    @pytest.mark.asyncio
    async def test_listing(self, services, context_for, outsider, files_id, tree):
        a, b, c, deep = tree
        context = context_for(outsider)
        assert [f.name for f in await services.file_objects.list_folders(context, files_id)] == ["A", "B"]
        assert [f.id for f in await services.file_objects.list_files(context, files_id, c.id)] == [deep.id]

    @pytest.mark.asyncio
    async def test_search_subtree(self, services, context_for, owner, files_id, tree):
        a, b, c, deep = tree
        context = context_for(owner)
        await services.file_objects.upload(context, "root", "deep-pending.txt", "text/plain", files_id)

        found = await services.file_objects.search(context, files_id, "root", "DEEP")
        assert [f.id for f in found] == [deep.id]
        assert await services.file_objects.search(context, files_id, b.id, "deep") == []
        with pytest.raises(ValidationError):
            await services.file_objects.search(context, files_id, "root", "de")


class TestDownloads:
    @pytest.mark.asyncio
    async def test_download_url_hides_pending(self, services, context_for, owner, outsider, files_id, upload):
        uploaded = await upload(context_for(owner), files_id, "a.txt")
        grant = await services.file_objects.upload(context_for(owner), "root", "b.txt", "text/plain", files_id)

        url = await services.file_objects.download_url(context_for(outsider), uploaded.id)
        assert uploaded.key in url
        with pytest.raises(NotFoundError):
            await services.file_objects.download_url(context_for(owner), grant.object.id)

    @pytest.mark.asyncio
    async def test_ticket_is_single_use(self, services, context_for, owner, files_id, upload):
        context = context_for(owner)
        folder = await services.file_objects.create_folder(context, files_id, "root", "docs")
        inside = await upload(context, files_id, "a.txt", folder=folder.id)
        loose = await upload(context, files_id, "b.txt")

        ticket = await services.file_objects.create_download_ticket(context, [folder.id, loose.id], "bundle")
        objects, name = await services.file_objects.redeem_ticket(ticket.id)

        assert {o.id for o in objects} == {inside.id, loose.id}
        assert name == "bundle"
        assert await services.file_objects.redeem_ticket(ticket.id) is None

    @pytest.mark.asyncio
    async def test_empty_ticket_refused(self, services, context_for, owner, files_id):
        folder = await services.file_objects.create_folder(context_for(owner), files_id, "root", "empty")
        with pytest.raises(ValidationError):
            await services.file_objects.create_download_ticket(context_for(owner), [folder.id])

    @pytest.mark.asyncio
    async def test_copy_charges_the_copier(self, services, context_for, owner, member, files_id, upload):
        original = await upload(context_for(owner), files_id, "a.txt")
        copied = await services.file_objects.copy(context_for(member), original.id, "root", files_id)

        assert copied.key != original.key
        assert copied.owner == member.id
        assert await _used_bytes(services, member) == 10


class TestStorageCleanup:
    @pytest.mark.asyncio
    async def test_batches(self, storage):
        cleanup = StorageCleanup(storage, batch_size=2)
        cleanup.schedule(["a", "b", None, "c"])
        await cleanup.wait()
        assert sorted(storage.delete_batches) == [["a", "b"], ["c"]]

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, storage):
        storage.delete_objects = AsyncMock(side_effect=StorageError("bucket gone"))
        cleanup = StorageCleanup(storage)
        cleanup.schedule(["a"])
        await cleanup.wait()
        storage.delete_objects.assert_awaited_once_with(["a"])
