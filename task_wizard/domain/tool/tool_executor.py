from typing import Dict, Any, List, Optional, Awaitable, Callable, TYPE_CHECKING
import structlog

from task_wizard.domain.errors import ToolExecutionError, ToolValidationError, TaskWizardError
from task_wizard.domain.models.session_state import TaskField
from task_wizard.domain.selection import valid_selection
from task_wizard.domain.tool.tool_schemas import (
    ProposeTaskIdeasArgs, ProvideFocusTopicsArgs, PresentProductOptionsArgs,
    DefineRequirementsArgs, CreateRubricArgs, GenerateFinalJSONArgs, AddAReasoningStepArgs
)
from task_wizard.domain.tool.tool_validator import ToolParameterValidator

if TYPE_CHECKING:
    from task_wizard.domain.tool.tool_registry import ToolRegistry

logger = structlog.get_logger(__name__)


Executor = Callable[[Any], Awaitable[Dict[str, Any]]]

DEFAULT_SUBJECT = "English and Social Studies"
FORCE_VALIDATE_KEY = "__forceValidate"


def subject_label(subjects: Optional[List[str]], default: str = DEFAULT_SUBJECT) -> str:
    cleaned = [subject.strip() for subject in subjects or [] if subject and subject.strip()]
    return " and ".join(cleaned) if cleaned else default


def placeholder_task_ideas(subjects: Optional[List[str]]) -> List[Dict[str, str]]:
    """Deterministic ideas used when the model supplies none"""

    subject = subject_label(subjects)
    return [
        {
            "title": f"{subject} Research Project",
            "description": (
                f"Students will research a topic related to {subject} and present their findings "
                "through a multimedia presentation, emphasizing critical analysis and communication skills."
            ),
        },
        {
            "title": f"{subject} Creative Portfolio",
            "description": (
                f"Students will create a portfolio that demonstrates their understanding of key concepts "
                f"in {subject} through a collection of creative works, reflections, and analytical pieces."
            ),
        },
        {
            "title": f"{subject} Community Impact Project",
            "description": (
                f"Students will identify a real-world problem related to {subject}, develop a solution "
                "proposal, and implement a small-scale version in their community with documentation "
                "of process and impact."
            ),
        },
    ]


def placeholder_focus_topics(subjects: Optional[List[str]]) -> List[str]:
    subject = subject_label(subjects, default="the selected task")
    return [
        f"The historical background of {subject}",
        f"Key people and communities connected to {subject}",
        f"Current debates and open questions in {subject}",
        f"How {subject} shows up in everyday life",
        f"Future challenges and opportunities in {subject}",
    ]


def placeholder_product_options(subjects: Optional[List[str]]) -> List[str]:
    subject = subject_label(subjects, default="the selected task")
    return [
        f"Written report on {subject}",
        f"Illustrated infographic about {subject}",
        f"Podcast episode exploring {subject}",
        f"Interactive website presenting {subject}",
        f"Physical model or display representing {subject}",
    ]


async def propose_task_ideas(params: ProposeTaskIdeasArgs) -> Dict[str, Any]:
    """Return three ideas, optionally with the user's selection"""

    ideas = [idea.model_dump() for idea in params.ideas]
    if not ideas:
        logger.info("Creating placeholder task ideas", subjects=params.subjects)
        ideas = placeholder_task_ideas(params.subjects)

    if params.selectedTaskIndex is not None:
        index = valid_selection(params.selectedTaskIndex, len(ideas))
        if index is None:
            logger.warning("Invalid selectedTaskIndex", selected_task_index=params.selectedTaskIndex)
            return {"ideas": ideas}
        return {"ideas": ideas, TaskField.SELECTED_TASK_INDEX: index}

    return {"ideas": ideas}


async def provide_focus_topics(params: ProvideFocusTopicsArgs) -> Dict[str, Any]:
    """Return focus topics, echoing any selection"""

    topics = list(params.topics) or placeholder_focus_topics(params.subjects)
    if params.selectedFocusTopics:
        return {
            TaskField.FOCUS_TOPICS: topics,
            TaskField.SELECTED_FOCUS_TOPICS: list(params.selectedFocusTopics),
            FORCE_VALIDATE_KEY: True,
        }
    return {TaskField.FOCUS_TOPICS: topics}


async def present_product_options(params: PresentProductOptionsArgs) -> Dict[str, Any]:
    """Return product options, echoing any selection"""

    options = list(params.options) or placeholder_product_options(params.subjects)
    if params.selectedProductOptions:
        return {
            TaskField.PRODUCT_OPTIONS: options,
            TaskField.SELECTED_PRODUCT_OPTIONS: list(params.selectedProductOptions),
            FORCE_VALIDATE_KEY: True,
        }
    return {TaskField.PRODUCT_OPTIONS: options}


async def define_requirements(params: DefineRequirementsArgs) -> Dict[str, Any]:
    return params.model_dump()


async def create_rubric(params: CreateRubricArgs) -> Dict[str, Any]:
    return params.model_dump(by_alias=True, exclude_none=True)


async def generate_final_json(params: GenerateFinalJSONArgs) -> Dict[str, Any]:
    return params.model_dump()


async def add_reasoning_step(params: AddAReasoningStepArgs) -> Dict[str, Any]:
    return params.model_dump()


class ToolExecutor:
    """Validates arguments and runs tool executors"""

    def __init__(self, registry: "ToolRegistry"):
        self.registry = registry

    async def execute_tool(self, tool_name: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        """Execute a tool by name with raw model-supplied arguments"""

        tool = self.registry.get_tool_info(tool_name)
        if tool is None:
            raise ToolExecutionError(tool_name, "unknown tool")

        validation = ToolParameterValidator.validate_tool_call(tool, parameters)
        if not validation.is_valid:
            raise ToolValidationError(tool_name, validation.errors)

        try:
            result = await tool.executor(validation.parameters)
        except TaskWizardError:
            raise
        except Exception as e:
            logger.error("Tool execution failed", tool_name=tool_name, error=str(e))
            raise ToolExecutionError(tool_name, str(e)) from e

        logger.debug("Tool executed", tool_name=tool_name, result_keys=sorted(result.keys()))
        return result
