from typing import Dict, Any, List, Optional, Callable, Mapping, Sequence
from dataclasses import dataclass
from pydantic import ValidationError
import structlog

from task_wizard.domain.errors import TaskWizardError
from task_wizard.domain.extraction.tool_result_extractor import (
    ToolResultExtractor, ExtractionContext, MessageLike
)
from task_wizard.domain.models.session_state import SessionRecord
from task_wizard.domain.models.transcript import ChatMessage, MessageRole
from task_wizard.domain.session.session_id import resolve_session_id
from task_wizard.domain.step.step_registry import StepRegistry, step_registry
from task_wizard.domain.tool.tool_registry import ToolDefinition
from task_wizard.infrastructure.observability.logging import wizard_logger
from task_wizard.infrastructure.store.session_store import SessionStore, session_key

logger = structlog.get_logger(__name__)


Predicate = Callable[[Mapping[str, Any]], bool]


def never_ready(data: Mapping[str, Any]) -> bool:
    """Predicate used to force the pending deferred transition"""
    return False


@dataclass
class TurnContext:
    """Everything the conversation driver needs for one model call"""
    session_id: str
    session: SessionRecord
    system_prompt: str
    tools: Dict[str, ToolDefinition]
    selected_task: Optional[Dict[str, Any]] = None
    update_applied: bool = False

    def tool_schemas(self) -> List[Dict[str, Any]]:
        return [tool.to_openai_schema() for tool in self.tools.values()]


class SessionController:
    """Manages wizard progress across sessions"""

    def __init__(
        self,
        store: SessionStore,
        steps: Optional[StepRegistry] = None,
        extractor: Optional[ToolResultExtractor] = None
    ):
        self.store = store
        self.steps = steps or step_registry
        self.extractor = extractor or ToolResultExtractor()

    async def get_session(self, session_id: str) -> SessionRecord:
        """Stored record, or a fresh one for an unknown session"""

        data = await self.store.get(session_key(session_id))
        logger.debug("Getting session", session_id=session_id, found=data is not None)

        if data is None:
            return SessionRecord.fresh()

        try:
            return SessionRecord.model_validate(data)
        except ValidationError as e:
            logger.warning("Stored session is unreadable, starting fresh", session_id=session_id, error=str(e))
            return SessionRecord.fresh()

    async def update_session(self, session_id: str, partial: Dict[str, Any]) -> None:
        """Read-modify-write merge of record fields (camelCase keys)"""

        current = await self.get_session(session_id)
        updated = SessionRecord.model_validate({**current.to_store(), **partial})

        wizard_logger.log_session_update(
            session_id=session_id,
            action="update",
            state_summary=updated.get_state_summary()
        )
        await self.store.set(session_key(session_id), updated.to_store())

    async def advance_if_ready(self, session_id: str, predicate: Predicate) -> SessionRecord:
        """
        Central state transition.

        A step already marked complete moves to the next step, regardless of
        the predicate. Otherwise the predicate decides whether the current
        step becomes complete. The move itself therefore always happens one
        call after completion was detected.
        """

        record = await self.get_session(session_id)

        if record.step_complete:
            if record.is_final_step:
                logger.info("Final step already complete", session_id=session_id)
                return record

            next_step = record.current_step + 1
            await self.update_session(session_id, {"currentStep": next_step, "stepComplete": False})
            wizard_logger.log_step_transition(
                session_id=session_id,
                from_step=record.current_step,
                to_step=next_step,
                reason="deferred_transition"
            )
            return await self.get_session(session_id)

        is_complete = bool(predicate(record.task_data))
        logger.info("Validating step", session_id=session_id, step=record.current_step, complete=is_complete)

        if is_complete:
            await self.update_session(session_id, {"stepComplete": True})

        return await self.get_session(session_id)

    async def reset_session(self, session_id: str) -> bool:
        """Drop the stored record; the next turn starts from step 1"""

        logger.info("Resetting session", session_id=session_id)
        return await self.store.delete(session_key(session_id))

    async def handle_turn(
        self,
        messages: Sequence[MessageLike],
        header_session_id: Optional[str] = None
    ) -> TurnContext:
        """Process one incoming conversation turn"""

        transcript = [
            message if isinstance(message, ChatMessage) else ChatMessage.model_validate(message)
            for message in messages
        ]
        if not transcript:
            raise TaskWizardError("Transcript contains no messages")

        session_id = resolve_session_id(transcript, header_session_id)
        structlog.contextvars.bind_contextvars(session_id=session_id)

        try:
            return await self._process_turn(session_id, transcript)
        finally:
            structlog.contextvars.unbind_contextvars("session_id")

    async def _process_turn(self, session_id: str, transcript: List[ChatMessage]) -> TurnContext:
        session = await self.get_session(session_id)

        # Pending transition from a step completed on the previous turn
        if transcript[-1].role == MessageRole.USER and session.step_complete:
            session = await self.advance_if_ready(session_id, never_ready)

        current_step = session.current_step
        step_prompt = self.steps.system_prompt(current_step, session.task_data)
        tools = self.steps.step_tools(current_step)

        context = ExtractionContext()
        update = self.extractor.extract(transcript, context)

        if update is not None:
            # A bundled selection only counts for the step that owns the tool
            force_validate = (
                update.force_validate
                and self.steps.step_for_tool(update.tool_name) == current_step
            )

            # String results carry no fields; the step is still re-validated
            if not update.is_empty():
                await self.update_session(session_id, {
                    "taskData": {**session.task_data, **update.to_dict()}
                })

            session = await self.advance_if_ready(
                session_id,
                lambda data: force_validate or self.steps.validate(current_step, data)
            )

            logger.info(
                "Turn processed",
                session_id=session_id,
                current_step=session.current_step,
                step_complete=session.step_complete,
                task_fields=sorted(session.task_data.keys())
            )

        system_prompt = step_prompt + self.steps.turn_instructions(session.current_step, session.step_complete)

        return TurnContext(
            session_id=session_id,
            session=session,
            system_prompt=system_prompt,
            tools=tools,
            selected_task=context.selected_task,
            update_applied=update is not None,
        )
