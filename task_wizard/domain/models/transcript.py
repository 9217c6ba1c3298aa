from typing import Dict, Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from task_wizard.domain.models.tool_result import ToolResult, classify_result


class MessageRole:
    """Roles used in the chat transcript"""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


def _string_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class ToolInvocation(BaseModel):
    """A tool call recorded on an assistant message"""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    tool_call_id: Optional[str] = Field(None, alias="toolCallId")
    tool_name: Optional[str] = Field(None, alias="toolName")
    state: Optional[str] = Field(None, description="partial-call, call or result")
    args: Any = None
    result: Any = None

    # Malformed identifiers make the invocation unrecognized, not invalid
    @field_validator("tool_call_id", "tool_name", "state", mode="before")
    @classmethod
    def _coerce_identifiers(cls, value: Any) -> Optional[str]:
        return _string_or_none(value)

    def classify(self) -> ToolResult:
        return classify_result(self.state, self.result)


class ChatMessage(BaseModel):
    """One message of the conversation transcript"""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = None
    role: str = ""
    content: Any = ""
    tool_invocations: Optional[List[ToolInvocation]] = Field(None, alias="toolInvocations")
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Optional[str]:
        return _string_or_none(value)

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("tool_invocations", mode="before")
    @classmethod
    def _keep_object_invocations(cls, value: Any) -> Optional[List[Any]]:
        if not isinstance(value, list):
            return None
        return [entry for entry in value if isinstance(entry, (dict, ToolInvocation))]

    @field_validator("metadata", mode="before")
    @classmethod
    def _object_metadata(cls, value: Any) -> Optional[Dict[str, Any]]:
        return value if isinstance(value, dict) else None

    @property
    def text(self) -> str:
        """Textual content; multi-part content is joined"""
        if isinstance(self.content, str):
            return self.content
        if isinstance(self.content, list):
            return "\n".join(
                part.get("text", "") for part in self.content
                if isinstance(part, dict) and isinstance(part.get("text"), str)
            )
        return ""

    @property
    def first_invocation(self) -> Optional[ToolInvocation]:
        if not self.tool_invocations:
            return None
        return self.tool_invocations[0]
