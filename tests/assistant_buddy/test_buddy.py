"""End-to-end tests of the buddy facade against the in-memory remote service."""

import pytest
import pytest_asyncio

from assistant_buddy.buddy import Buddy
from assistant_buddy.errors import ConfigurationError


@pytest_asyncio.fixture
async def buddy(project_dir, fake_client, test_service_config):
    return await Buddy.init_from_dir(project_dir, service_config=test_service_config, client=fake_client)


class TestInitFromDir:
    @pytest.mark.asyncio
    async def test_assistant_synced_with_project(self, buddy, fake_client, project_dir):
        remote = fake_client.assistants[buddy.assistant_id]

        assert buddy.name == "buddy-01"
        assert remote.model == "gpt-4o-mini"
        assert remote.instructions == "You are a helpful buddy.\n"
        bundle = project_dir / ".buddy" / "files" / f"buddy-01-source-code-bundle-{buddy.assistant_id}.py"
        assert bundle.is_file()
        assert fake_client.attachments[buddy.assistant_id] == list(fake_client.files)

    @pytest.mark.asyncio
    async def test_second_init_reuses_everything(self, buddy, fake_client, project_dir, test_service_config):
        fake_client.calls.clear()

        again = await Buddy.init_from_dir(project_dir, service_config=test_service_config, client=fake_client)

        assert again.assistant_id == buddy.assistant_id
        assert fake_client.mutating_calls() == ["update_assistant_instructions"]

    @pytest.mark.asyncio
    async def test_recreate_replaces_assistant(self, buddy, fake_client, project_dir, test_service_config):
        recreated = await Buddy.init_from_dir(
            project_dir, recreate_assistant=True, service_config=test_service_config, client=fake_client
        )

        assert recreated.assistant_id != buddy.assistant_id
        assert list(fake_client.assistants) == [recreated.assistant_id]
        bundles = sorted(p.name for p in (project_dir / ".buddy" / "files").iterdir())
        assert bundles == [f"buddy-01-source-code-bundle-{recreated.assistant_id}.py"]

    @pytest.mark.asyncio
    async def test_missing_config(self, tmp_path, fake_client, test_service_config):
        with pytest.raises(ConfigurationError):
            await Buddy.init_from_dir(tmp_path, service_config=test_service_config, client=fake_client)

        assert fake_client.calls == []


class TestBuddyOperations:
    @pytest.mark.asyncio
    async def test_upload_instructions_without_file(self, buddy, project_dir, fake_client):
        (project_dir / "instructions.md").unlink()
        fake_client.calls.clear()

        assert await buddy.upload_instructions() is False
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_upload_files_recreate(self, buddy):
        assert await buddy.upload_files(True) == 1
        assert await buddy.upload_files(False) == 0

    @pytest.mark.asyncio
    async def test_conversation_persists_under_data_dir(self, buddy, project_dir):
        conv = await buddy.load_or_create_conv()

        assert (project_dir / ".buddy" / "conv.json").is_file()
        assert (await buddy.load_or_create_conv()) == conv
        assert (await buddy.load_or_create_conv(True)) != conv

    @pytest.mark.asyncio
    async def test_chat_returns_assistant_reply(self, buddy, fake_client, mocker):
        mocker.patch.object(buddy.orchestrator, "sleep", mocker.AsyncMock())
        fake_client.run_statuses = ["queued", "completed"]
        fake_client.reply_text = "It prints a and b."
        conv = await buddy.load_or_create_conv()

        reply = await buddy.chat(conv, "What does src do?")

        assert reply == "It prints a and b."


class TestInstructionsEncoding:
    @pytest.mark.asyncio
    async def test_undecodable_instructions_are_a_config_error(self, buddy, project_dir, fake_client):
        (project_dir / "instructions.md").write_bytes(b"\xff\xfe bad")
        fake_client.calls.clear()

        with pytest.raises(ConfigurationError, match="not valid UTF-8"):
            await buddy.upload_instructions()

        assert fake_client.mutating_calls() == []

    @pytest.mark.asyncio
    async def test_undecodable_instructions_fail_startup_cleanly(self, project_dir, fake_client, test_service_config):
        (project_dir / "instructions.md").write_bytes(b"\xff\xfe bad")

        with pytest.raises(ConfigurationError):
            await Buddy.init_from_dir(project_dir, service_config=test_service_config, client=fake_client)
