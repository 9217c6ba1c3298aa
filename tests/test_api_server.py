import pytest
from fastapi.testclient import TestClient

from task_wizard.application.api.api_server import create_app
from task_wizard.infrastructure.store.memory_store import InMemorySessionStore

from helpers import SAMPLE_IDEAS, system_message, user_message, tool_message


@pytest.fixture
def client(settings) -> TestClient:
    return TestClient(create_app(settings, store=InMemorySessionStore()))


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["store"] == "InMemorySessionStore"


def test_chat_returns_turn_for_marked_session(client):
    response = client.post("/api/chat", json={"messages": [system_message("abc123"), user_message("science")]})

    assert response.status_code == 200
    assert response.headers["X-Session-ID"] == "abc123"

    body = response.json()
    assert body["sessionId"] == "abc123"
    assert body["currentStep"] == 1
    assert body["stepComplete"] is False
    assert body["taskData"] == {}
    assert body["selectedTask"] is None
    assert "Current step: 1" in body["system"]
    assert {tool["function"]["name"] for tool in body["tools"]} == {"proposeTaskIdeas", "addAReasoningStep"}


def test_chat_uses_header_session_id(client):
    response = client.post(
        "/api/chat",
        json={"messages": [user_message("hello")]},
        headers={"X-Session-ID": "from-header"}
    )

    assert response.status_code == 200
    assert response.json()["sessionId"] == "from-header"


def test_chat_records_selection_and_exposes_session(client):
    messages = [
        system_message("abc123"),
        user_message("science"),
        tool_message("proposeTaskIdeas", {"ideas": SAMPLE_IDEAS, "selectedTaskIndex": 0}),
    ]

    turn = client.post("/api/chat", json={"messages": messages}).json()

    assert turn["stepComplete"] is True
    assert turn["selectedTask"] == SAMPLE_IDEAS[0]

    session = client.get("/api/session/abc123").json()
    assert session == {
        "sessionId": "abc123",
        "currentStep": 1,
        "stepComplete": True,
        "taskData": {"taskIdeas": SAMPLE_IDEAS, "selectedTaskIndex": 0},
    }

    reset = client.delete("/api/session/abc123").json()
    assert reset == {"sessionId": "abc123", "deleted": True}
    assert client.get("/api/session/abc123").json()["currentStep"] == 1


def test_chat_failure_returns_error_payload(client):
    response = client.post("/api/chat", json={"messages": []})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] is True
    assert body["message"].startswith("Error processing chat request:")


def test_malformed_body_returns_error_payload(client):
    response = client.post("/api/chat", content=b"not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 500
    assert response.json()["error"] is True


class FailingController:
    async def handle_turn(self, messages, header_session_id=None):
        raise RuntimeError()


def test_chat_failure_without_message_reports_unknown_error(client):
    client.app.state.session_controller = FailingController()

    response = client.post("/api/chat", json={"messages": [user_message("hi")]})

    assert response.status_code == 500
    assert response.json() == {"error": True, "message": "Error processing chat request: Unknown error"}


def test_malformed_tool_invocation_does_not_fail_turn(client):
    messages = [
        system_message("abc123"),
        user_message("science"),
        {"role": "assistant", "toolInvocations": [{"toolName": None, "state": "result", "result": {}}]},
    ]

    response = client.post("/api/chat", json={"messages": messages})

    assert response.status_code == 200
    assert response.json()["currentStep"] == 1
