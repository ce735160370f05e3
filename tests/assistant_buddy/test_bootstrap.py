import pytest

from assistant_buddy.bootstrap import (
    get_config_repository,
    get_conversation_manager,
    get_remote_client,
    get_run_orchestrator,
    get_service_config,
)
from assistant_buddy.entities import ServiceConfig
from assistant_buddy.errors import AuthenticationError, ConfigurationError
from assistant_buddy.infrastructure import OpenAIRemoteClient
from assistant_buddy.repositories import LocalConfigRepository, LocalConversationRepository


@pytest.mark.unit
def test__get_service_config__invalid_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BUDDY_POLL_INTERVAL", "soon")

    with pytest.raises(ConfigurationError, match="Invalid environment configuration"):
        get_service_config()


@pytest.mark.unit
def test__get_remote_client__requires_api_key():
    with pytest.raises(AuthenticationError):
        get_remote_client(ServiceConfig(openai_api_key=""))


@pytest.mark.unit
def test__get_remote_client__openai(test_service_config):
    assert isinstance(get_remote_client(test_service_config), OpenAIRemoteClient)


@pytest.mark.unit
def test__get_config_repository(tmp_path):
    assert isinstance(get_config_repository(tmp_path), LocalConfigRepository)


@pytest.mark.unit
def test__get_conversation_manager(fake_client, tmp_path):
    manager = get_conversation_manager(fake_client, tmp_path)

    assert isinstance(manager.repository, LocalConversationRepository)
    assert manager.repository.conversation_file == tmp_path / "conv.json"


@pytest.mark.unit
def test__get_run_orchestrator__uses_service_config(fake_client):
    config = ServiceConfig(openai_api_key="k", poll_interval=2.0, run_timeout=30)

    orchestrator = get_run_orchestrator(fake_client, config)

    assert orchestrator.poll_interval == 2.0
    assert orchestrator.max_wait == 30


@pytest.mark.unit
def test__get_run_orchestrator__unbounded(fake_client, test_service_config):
    assert get_run_orchestrator(fake_client, test_service_config).max_wait is None
