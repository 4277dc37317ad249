"""Unit tests for promptforge/workspace/workspace.py"""
import threading

import pytest
from sqlalchemy.exc import OperationalError

from promptforge.core.ids import parse_timestamp
from promptforge.schemas import PromptRecord, RevisionRecord
from promptforge.workspace import InvalidCommandError, PromptWorkspace, RecordNotFoundError

from conftest import OWNER_ID


def remote_row(prompt_id, updated, title="from remote"):
    return {
        "id": prompt_id,
        "user_id": OWNER_ID,
        "folder_id": None,
        "title": title,
        "body_md": "remote body",
        "is_pinned": False,
        "created_at": "2024-01-01T00:00:00.000Z",
        "updated_at": updated,
    }


class TestCreatePrompt:

    @pytest.mark.asyncio
    async def test_create_then_read_owner_collection(self, workspace, store):
        prompt = await workspace.create_prompt("Title", "Body")

        assert len(prompt.id) == 32
        assert prompt.created_at == prompt.updated_at
        assert prompt.user_id == OWNER_ID
        assert prompt.is_pinned is False
        assert workspace.prompts[0] == prompt
        assert store.get_prompts(OWNER_ID) == [prompt]

    @pytest.mark.asyncio
    async def test_newest_prompt_first(self, workspace):
        first = await workspace.create_prompt("First", "")
        second = await workspace.create_prompt("Second", "")
        assert [p.id for p in workspace.prompts] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_mirrors_insert(self, workspace, remote):
        prompt = await workspace.create_prompt("Title", "Body", folder_id="f1")

        request = remote.calls("POST", "prompts")[0]
        assert remote.body(request) == prompt.model_dump()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", ["down", "reject"])
    async def test_remote_failure_does_not_raise(self, workspace, remote, store, mode):
        remote.mode = mode

        prompt = await workspace.create_prompt("Title", "Body")

        assert prompt in workspace.prompts
        assert store.get_prompts(OWNER_ID) == [prompt]

    @pytest.mark.asyncio
    async def test_local_writes_run_off_the_event_loop(self, workspace, store, monkeypatch):
        loop_thread = threading.get_ident()
        seen = []
        save_prompt = store.save_prompt

        def recording_save(prompt):
            seen.append(threading.get_ident())
            save_prompt(prompt)

        monkeypatch.setattr(store, "save_prompt", recording_save)

        prompt = await workspace.create_prompt("Title", "Body")
        await workspace.update_prompt(prompt.id, {"title": "Renamed"})

        assert len(seen) == 2
        assert loop_thread not in seen
        assert store.get_prompts(OWNER_ID)[0].title == "Renamed"

    @pytest.mark.asyncio
    async def test_local_failure_aborts_before_cache(self, workspace, remote, session_factory):
        with session_factory() as db:
            db.connection().exec_driver_sql("DROP TABLE prompts")
            db.commit()

        with pytest.raises(OperationalError):
            await workspace.create_prompt("Title", "Body")

        assert workspace.prompts == []
        assert remote.requests == []


class TestUpdatePrompt:

    @pytest.mark.asyncio
    async def test_partial_update(self, workspace, store):
        prompt = await workspace.create_prompt("Title", "Body")

        updated = await workspace.update_prompt(prompt.id, {"title": "New title"})

        assert updated.title == "New title"
        assert updated.body_md == "Body"
        assert updated.updated_at > prompt.updated_at
        assert workspace.get_prompt(prompt.id) == updated
        assert store.get_prompts(OWNER_ID)[0].title == "New title"

    @pytest.mark.asyncio
    async def test_immutable_fields_ignored(self, workspace):
        prompt = await workspace.create_prompt("Title", "Body")

        updated = await workspace.update_prompt(
            prompt.id, {"id": "other", "user_id": "intruder", "created_at": "1999-01-01T00:00:00.000Z"}
        )

        assert updated.id == prompt.id
        assert updated.user_id == OWNER_ID
        assert updated.created_at == prompt.created_at

    @pytest.mark.asyncio
    async def test_remote_patch_carries_changes_and_timestamp(self, workspace, remote):
        prompt = await workspace.create_prompt("Title", "Body")

        updated = await workspace.update_prompt(prompt.id, {"body_md": "<p>new</p>"})

        patch = remote.calls("PATCH", "prompts")[0]
        assert patch.url.params["id"] == f"eq.{prompt.id}"
        assert remote.body(patch) == {"body_md": "<p>new</p>", "updated_at": updated.updated_at}

    @pytest.mark.asyncio
    async def test_unknown_prompt(self, workspace):
        with pytest.raises(RecordNotFoundError):
            await workspace.update_prompt("missing", {"title": "x"})


class TestTogglePin:

    @pytest.mark.asyncio
    async def test_toggle_twice_restores_flag(self, workspace):
        prompt = await workspace.create_prompt("Title", "Body")

        pinned = await workspace.toggle_pin(prompt.id)
        unpinned = await workspace.toggle_pin(prompt.id)

        assert pinned.is_pinned is True
        assert unpinned.is_pinned is False
        assert prompt.updated_at < pinned.updated_at < unpinned.updated_at

    @pytest.mark.asyncio
    async def test_goes_through_update_path(self, workspace, remote):
        prompt = await workspace.create_prompt("Title", "Body")

        await workspace.toggle_pin(prompt.id)

        assert remote.body(remote.calls("PATCH", "prompts")[0])["is_pinned"] is True


class TestDeletePrompt:

    @pytest.mark.asyncio
    async def test_delete_removes_everywhere_and_cascades_links(self, workspace, store, remote):
        prompt = await workspace.create_prompt("Title", "Body")
        tag = await workspace.create_tag("draft")
        await workspace.add_tag_to_prompt(prompt.id, tag.id)

        await workspace.delete_prompt(prompt.id)

        assert workspace.prompts == []
        assert workspace.prompt_tags == []
        assert store.get_prompts(OWNER_ID) == []
        assert store.get_prompt_tags(OWNER_ID) == []
        assert remote.calls("DELETE", "prompts")[0].url.params["id"] == f"eq.{prompt.id}"

    @pytest.mark.asyncio
    async def test_remote_failure_still_deletes_locally(self, workspace, store, remote):
        prompt = await workspace.create_prompt("Title", "Body")
        remote.mode = "down"

        await workspace.delete_prompt(prompt.id)

        assert store.get_prompts(OWNER_ID) == []


class TestSearch:

    @pytest.mark.asyncio
    async def test_case_insensitive_title_and_body(self, workspace):
        a = await workspace.create_prompt("Email Writer", "Draft replies")
        b = await workspace.create_prompt("Summariser", "Condense an EMAIL thread")
        await workspace.create_prompt("Poem", "Roses")

        results = workspace.search_prompts("email")

        assert {p.id for p in results} == {a.id, b.id}

    @pytest.mark.asyncio
    async def test_blank_query_returns_everything(self, workspace):
        await workspace.create_prompt("One", "")
        await workspace.create_prompt("Two", "")
        assert len(workspace.search_prompts("   ")) == 2

    @pytest.mark.asyncio
    async def test_searches_cache_not_store(self, workspace, store):
        store.save_prompt(PromptRecord(
            id="hidden",
            user_id=OWNER_ID,
            title="findme",
            created_at="2024-01-01T00:00:00.000Z",
            updated_at="2024-01-01T00:00:00.000Z",
        ))
        assert workspace.search_prompts("findme") == []


class TestRevisions:

    @pytest.mark.asyncio
    async def test_append_only_no_dedup(self, workspace, remote):
        prompt = await workspace.create_prompt("Title", "Body")

        first = await workspace.create_revision(prompt.id, "same", command="enhance", token_usage=10)
        second = await workspace.create_revision(prompt.id, "same")

        revisions = workspace.get_revisions(prompt.id)
        assert {r.id for r in revisions} == {first.id, second.id}
        assert first.llm_provider == "openai"
        assert first.command_text == "enhance"
        assert len(remote.calls("POST", "revisions")) == 2

    @pytest.mark.asyncio
    async def test_rapid_revisions_keep_creation_order(self, workspace):
        prompt = await workspace.create_prompt("Title", "Body")

        created = [await workspace.create_revision(prompt.id, f"v{n}") for n in range(5)]

        stamps = [parse_timestamp(r.created_at) for r in created]
        assert stamps == sorted(set(stamps))
        assert [r.id for r in workspace.get_revisions(prompt.id)] == [r.id for r in reversed(created)]

        refined = await workspace.refine_prompt(prompt.id, "/enhance")
        assert refined.parent_revision_id == created[-1].id

    @pytest.mark.asyncio
    async def test_revision_follows_stored_history(self, workspace, store):
        prompt = await workspace.create_prompt("Title", "Body")
        store.save_revision(
            RevisionRecord(
                id="future",
                prompt_id=prompt.id,
                body_md="ahead",
                created_at="2999-01-01T00:00:00.000Z",
            )
        )

        revision = await workspace.create_revision(prompt.id, "next")

        assert revision.created_at == "2999-01-01T00:00:00.001Z"
        assert workspace.get_revisions(prompt.id)[0].id == revision.id

    @pytest.mark.asyncio
    async def test_unknown_prompt(self, workspace):
        with pytest.raises(RecordNotFoundError):
            await workspace.create_revision("missing", "body")

    @pytest.mark.asyncio
    async def test_refine_enhance(self, workspace):
        prompt = await workspace.create_prompt("Title", "Write a haiku")

        revision = await workspace.refine_prompt(prompt.id, "/enhance")

        assert revision.command_text == "enhance"
        assert "Write a haiku" in revision.body_md
        assert revision.token_usage == len("Write a haiku") * 3 // 4 + 50
        assert revision.parent_revision_id is None

    @pytest.mark.asyncio
    async def test_refine_shorten_links_parent(self, workspace):
        prompt = await workspace.create_prompt("Title", "x" * 200)
        first = await workspace.refine_prompt(prompt.id, "enhance")

        revision = await workspace.refine_prompt(prompt.id, "/shorten 50", provider="anthropic")

        assert revision.command_text == "shorten 50"
        assert revision.token_usage == 45
        assert revision.llm_provider == "anthropic"
        assert revision.parent_revision_id == first.id

    @pytest.mark.asyncio
    async def test_bare_shorten_uses_default_length(self, workspace):
        prompt = await workspace.create_prompt("Title", "Body")
        revision = await workspace.refine_prompt(prompt.id, "shorten")
        assert revision.command_text == "shorten 100"

    @pytest.mark.asyncio
    async def test_refine_rejects_unknown_command(self, workspace):
        prompt = await workspace.create_prompt("Title", "Body")
        with pytest.raises(InvalidCommandError):
            await workspace.refine_prompt(prompt.id, "/translate")

    @pytest.mark.asyncio
    async def test_refine_without_provider(self, store, mirror):
        workspace = PromptWorkspace(OWNER_ID, store=store, mirror=mirror)
        prompt = await workspace.create_prompt("Title", "Body")
        with pytest.raises(InvalidCommandError):
            await workspace.refine_prompt(prompt.id, "/enhance")


class TestFoldersAndTags:

    @pytest.mark.asyncio
    async def test_create_folder_and_tag(self, workspace, store, remote):
        folder = await workspace.create_folder("Work")
        tag = await workspace.create_tag("urgent", color="#f00")

        assert workspace.folders == [folder]
        assert workspace.tags == [tag]
        assert store.get_folders(OWNER_ID) == [folder]
        assert store.get_tags(OWNER_ID) == [tag]
        assert len(remote.calls("POST", "folders")) == 1
        assert remote.body(remote.calls("POST", "tags")[0])["color"] == "#f00"

    @pytest.mark.asyncio
    async def test_delete_folder_unfiles_prompts(self, workspace, store):
        folder = await workspace.create_folder("Work")
        prompt = await workspace.create_prompt("Title", "Body", folder_id=folder.id)

        await workspace.delete_folder(folder.id)

        assert workspace.folders == []
        assert store.get_folders(OWNER_ID) == []
        assert workspace.get_prompt(prompt.id).folder_id is None

    @pytest.mark.asyncio
    async def test_tag_links(self, workspace, store, remote):
        prompt = await workspace.create_prompt("Title", "Body")
        tag = await workspace.create_tag("draft")

        await workspace.add_tag_to_prompt(prompt.id, tag.id)
        await workspace.add_tag_to_prompt(prompt.id, tag.id)

        assert workspace.tags_for_prompt(prompt.id) == [tag]
        assert len(store.get_prompt_tags(OWNER_ID)) == 1
        assert len(remote.calls("POST", "prompt_tags")) == 1

        await workspace.remove_tag_from_prompt(prompt.id, tag.id)

        assert workspace.tags_for_prompt(prompt.id) == []
        assert store.get_prompt_tags(OWNER_ID) == []
        delete = remote.calls("DELETE", "prompt_tags")[0]
        assert delete.url.params["tag_id"] == f"eq.{tag.id}"

    @pytest.mark.asyncio
    async def test_delete_tag_cascades_links(self, workspace, store):
        prompt = await workspace.create_prompt("Title", "Body")
        tag = await workspace.create_tag("draft")
        await workspace.add_tag_to_prompt(prompt.id, tag.id)

        await workspace.delete_tag(tag.id)

        assert workspace.tags == []
        assert workspace.prompt_tags == []
        assert store.get_prompt_tags(OWNER_ID) == []

    @pytest.mark.asyncio
    async def test_unknown_tag(self, workspace):
        prompt = await workspace.create_prompt("Title", "Body")
        with pytest.raises(RecordNotFoundError):
            await workspace.add_tag_to_prompt(prompt.id, "missing")


class TestLoad:

    @pytest.mark.asyncio
    async def test_remote_replaces_prompts(self, workspace, store, remote, caplog):
        local = PromptRecord(
            id="local-only",
            user_id=OWNER_ID,
            title="offline draft",
            created_at="2024-01-01T00:00:00.000Z",
            updated_at="2024-01-01T00:00:00.000Z",
        )
        store.save_prompt(local)
        remote.rows = [remote_row("r1", "2024-02-01T00:00:00.000Z")]

        await workspace.load()

        assert [p.id for p in workspace.prompts] == ["r1"]
        assert {p.id for p in store.get_prompts(OWNER_ID)} == {"local-only", "r1"}
        assert "local_only" in caplog.text

    @pytest.mark.asyncio
    async def test_remote_unreachable_keeps_local(self, workspace, store, remote):
        store.save_prompt(PromptRecord(
            id="p1",
            user_id=OWNER_ID,
            title="local",
            created_at="2024-01-01T00:00:00.000Z",
            updated_at="2024-01-01T00:00:00.000Z",
        ))
        remote.mode = "down"

        await workspace.load()

        assert [p.id for p in workspace.prompts] == ["p1"]
        assert workspace.loaded is True

    @pytest.mark.asyncio
    async def test_only_prompts_come_from_remote(self, workspace, store, remote):
        await workspace.create_folder("Local folder")
        remote.rows = []

        await workspace.load()

        assert [f.name for f in workspace.folders] == ["Local folder"]
        assert remote.calls("GET", "folders") == []

    @pytest.mark.asyncio
    async def test_malformed_remote_rows_skipped(self, workspace, remote):
        remote.rows = [remote_row("r1", "2024-02-01T00:00:00.000Z"), {"id": "broken"}]

        await workspace.load()

        assert [p.id for p in workspace.prompts] == ["r1"]
