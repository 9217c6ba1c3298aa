import pytest

from task_wizard.infrastructure.config.settings import ServerSettings
from task_wizard.infrastructure.store.memory_store import InMemorySessionStore


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def settings() -> ServerSettings:
    return ServerSettings(
        kv_url="",
        kv_rest_api_url="",
        session_ttl_seconds=None,
        log_level="WARNING",
        log_format="console",
        service_name="task-wizard-test",
        cors_allow_origins=[],
        version="test",
    )
