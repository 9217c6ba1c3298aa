from typing import Dict, Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from task_wizard.domain.models.transcript import ChatMessage


class ChatRequest(BaseModel):
    """Transcript posted by the chat UI on every turn"""
    messages: List[ChatMessage] = Field(default_factory=list)


class SessionPayload(BaseModel):
    """Session record as exposed over HTTP"""
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    current_step: int = Field(alias="currentStep")
    step_complete: bool = Field(alias="stepComplete")
    task_data: Dict[str, Any] = Field(default_factory=dict, alias="taskData")


class TurnResponse(SessionPayload):
    """Prompt, tools and session state for the model call of this turn"""
    system: str = Field(description="System prompt for the current step")
    tools: List[Dict[str, Any]] = Field(default_factory=list, description="OpenAI-format tool schemas")
    selected_task: Optional[Dict[str, Any]] = Field(None, alias="selectedTask")


class SessionResetResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    deleted: bool


class ErrorResponse(BaseModel):
    """Structured failure payload"""
    error: bool = True
    message: str
