from typing import Optional, Sequence
import re
import uuid

from task_wizard.domain.models.transcript import ChatMessage, MessageRole


SESSION_ID_HEADER = "X-Session-ID"
SESSION_MARKER = re.compile(r"Session-ID: ([a-f0-9-]+)", re.IGNORECASE)


def session_id_from_system_message(messages: Sequence[ChatMessage]) -> Optional[str]:
    """Marker embedded in the first system message"""

    system_message = next((m for m in messages if m.role == MessageRole.SYSTEM), None)
    if system_message is None:
        return None
    match = SESSION_MARKER.search(system_message.text)
    return match.group(1) if match else None


def session_id_from_metadata(messages: Sequence[ChatMessage]) -> Optional[str]:
    for message in messages:
        session_id = (message.metadata or {}).get("sessionId")
        if session_id:
            return str(session_id)
    return None


def extract_session_id(messages: Sequence[ChatMessage]) -> Optional[str]:
    """Session id carried by the transcript itself"""

    return session_id_from_system_message(messages) or session_id_from_metadata(messages)


def resolve_session_id(messages: Sequence[ChatMessage], header_value: Optional[str] = None) -> str:
    """
    Discovery order: system message marker, message metadata, transport
    header, then a newly minted UUID.
    """

    session_id = extract_session_id(messages)
    if session_id:
        return session_id
    if header_value and header_value.strip():
        return header_value.strip()
    return str(uuid.uuid4())
