from typing import Dict, Any, List, Optional, Callable, Sequence, Union
from dataclasses import dataclass
import structlog

from task_wizard.domain.errors import ToolProcessingError
from task_wizard.domain.extraction.strategies import (
    IDEA_STRATEGIES, FOCUS_TOPIC_STRATEGIES, PRODUCT_OPTION_STRATEGIES,
    first_match, valid_ideas, non_empty_selection
)
from task_wizard.domain.models.session_state import TaskField
from task_wizard.domain.models.tool_result import (
    NormalizedUpdate, PendingResult, ErrorResult, TextResult, StructuredResult
)
from task_wizard.domain.models.transcript import ChatMessage, MessageRole
from task_wizard.domain.selection import valid_selection
from task_wizard.domain.tool.tool_schemas import ToolName
from task_wizard.infrastructure.observability.logging import wizard_logger

logger = structlog.get_logger(__name__)


@dataclass
class ExtractionContext:
    """In-memory side data gathered while extracting a turn"""
    selected_task: Optional[Dict[str, Any]] = None


Handler = Callable[[Dict[str, Any], ExtractionContext], Dict[str, Any]]
MessageLike = Union[ChatMessage, Dict[str, Any]]


def _as_message(message: MessageLike) -> ChatMessage:
    if isinstance(message, ChatMessage):
        return message
    return ChatMessage.model_validate(message)


def process_task_ideas(payload: Dict[str, Any], context: ExtractionContext) -> Dict[str, Any]:
    """Idea list from any known shape, plus a validated selection"""

    ideas = valid_ideas(first_match(payload, IDEA_STRATEGIES))
    logger.debug("Valid task ideas", count=len(ideas))

    raw_index = payload.get(TaskField.SELECTED_TASK_INDEX)
    if raw_index is None:
        return {TaskField.TASK_IDEAS: ideas}

    if not ideas:
        logger.warning("selectedTaskIndex provided but no valid ideas found")
        return {TaskField.TASK_IDEAS: ideas}

    index = valid_selection(raw_index, len(ideas))
    if index is None:
        logger.warning("Invalid selectedTaskIndex", selected_task_index=raw_index)
        return {TaskField.TASK_IDEAS: ideas}

    context.selected_task = ideas[index]
    return {
        TaskField.TASK_IDEAS: ideas,
        TaskField.SELECTED_TASK_INDEX: index,
    }


def _options_with_selection(
    payload: Dict[str, Any],
    strategies,
    list_field: str,
    selection_field: str
) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}

    options = first_match(payload, strategies)
    if options is not None:
        fields[list_field] = options

    selection = non_empty_selection(payload, selection_field)
    if selection is not None:
        fields[selection_field] = selection

    return fields


def process_focus_topics(payload: Dict[str, Any], context: ExtractionContext) -> Dict[str, Any]:
    return _options_with_selection(
        payload, FOCUS_TOPIC_STRATEGIES, TaskField.FOCUS_TOPICS, TaskField.SELECTED_FOCUS_TOPICS
    )


def process_product_options(payload: Dict[str, Any], context: ExtractionContext) -> Dict[str, Any]:
    return _options_with_selection(
        payload, PRODUCT_OPTION_STRATEGIES, TaskField.PRODUCT_OPTIONS, TaskField.SELECTED_PRODUCT_OPTIONS
    )


def process_requirements(payload: Dict[str, Any], context: ExtractionContext) -> Dict[str, Any]:
    return {TaskField.REQUIREMENTS: payload}


def process_rubric(payload: Dict[str, Any], context: ExtractionContext) -> Dict[str, Any]:
    return {TaskField.RUBRIC: payload}


def process_final_json(payload: Dict[str, Any], context: ExtractionContext) -> Dict[str, Any]:
    return {TaskField.FINAL_OUTPUT: payload}


SELECTION_FIELDS = {
    ToolName.FOCUS_TOPICS: TaskField.SELECTED_FOCUS_TOPICS,
    ToolName.PRODUCT_OPTIONS: TaskField.SELECTED_PRODUCT_OPTIONS,
}


class ToolResultExtractor:
    """Finds the latest actionable tool invocation and normalizes its result"""

    def __init__(self):
        self.handlers: Dict[ToolName, Handler] = {
            ToolName.TASK_IDEAS: process_task_ideas,
            ToolName.FOCUS_TOPICS: process_focus_topics,
            ToolName.PRODUCT_OPTIONS: process_product_options,
            ToolName.REQUIREMENTS: process_requirements,
            ToolName.RUBRIC: process_rubric,
            ToolName.FINAL_JSON: process_final_json,
        }

    def extract(
        self,
        messages: Sequence[MessageLike],
        context: Optional[ExtractionContext] = None
    ) -> Optional[NormalizedUpdate]:
        """
        Scan the transcript from newest to oldest.

        Only the first invocation of each assistant message is inspected.
        Returns None when nothing actionable exists or when the latest
        terminal invocation carries an upstream error marker.
        """

        context = context if context is not None else ExtractionContext()
        transcript: List[ChatMessage] = [_as_message(message) for message in messages]

        logger.debug("Scanning messages for tool invocations", message_count=len(transcript))

        for message in reversed(transcript):
            if message.role != MessageRole.ASSISTANT:
                continue

            invocation = message.first_invocation
            if invocation is None:
                continue

            result = invocation.classify()

            if isinstance(result, PendingResult):
                logger.debug("No result yet for tool call", tool_name=invocation.tool_name)
                continue

            if isinstance(result, ErrorResult):
                logger.error("Error in tool call", tool_name=invocation.tool_name, error=result.message)
                return None

            tool = ToolName.parse(invocation.tool_name)
            handler = self.handlers.get(tool) if tool is not None else None
            if handler is None:
                # Reasoning annotations and unknown tools are never actionable
                continue

            update = self._normalize(tool, handler, result, context)
            wizard_logger.log_tool_extraction(
                tool_name=tool.value,
                fields=sorted(update.fields.keys()),
                force_validate=update.force_validate
            )
            return update

        logger.debug("No actionable tool invocations found")
        return None

    def _normalize(
        self,
        tool: ToolName,
        handler: Handler,
        result: Union[TextResult, StructuredResult],
        context: ExtractionContext
    ) -> NormalizedUpdate:
        if isinstance(result, TextResult):
            logger.info("Received string result", tool_name=tool.value, preview=result.text[:100])
            return NormalizedUpdate(tool_name=tool.value)

        try:
            fields = handler(result.payload, context)
        except Exception as e:
            logger.error("Error processing tool", tool_name=tool.value, error=str(e))
            raise ToolProcessingError(tool.value, str(e)) from e

        selection_field = SELECTION_FIELDS.get(tool)
        force_validate = selection_field is not None and selection_field in fields

        return NormalizedUpdate(tool_name=tool.value, fields=fields, force_validate=force_validate)
