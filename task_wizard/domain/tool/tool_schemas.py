from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field

from task_wizard.domain.models.session_state import TaskIdea, Requirements, Rubric, ReasoningStep


class ToolName(str, Enum):
    """Closed set of tools the model may call"""
    REASONING = "addAReasoningStep"
    TASK_IDEAS = "proposeTaskIdeas"
    FOCUS_TOPICS = "provideFocusTopics"
    PRODUCT_OPTIONS = "presentProductOptions"
    REQUIREMENTS = "defineRequirements"
    RUBRIC = "createRubric"
    FINAL_JSON = "generateFinalJSON"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ToolName"]:
        """Return the matching tool name or None for anything unrecognized"""
        try:
            return cls(value)
        except ValueError:
            return None


class ProposeTaskIdeasArgs(BaseModel):
    """Arguments for proposeTaskIdeas"""
    subjects: List[str] = Field(default_factory=list, description="Subjects the educator wants to cover")
    ideas: List[TaskIdea] = Field(default_factory=list, description="Three task ideas with title and description")
    selectedTaskIndex: Optional[int] = Field(None, description="Zero-based index of the idea the user chose")


class ProvideFocusTopicsArgs(BaseModel):
    """Arguments for provideFocusTopics"""
    topics: List[str] = Field(default_factory=list, max_length=10, description="List of 5-10 diverse focus topics")
    selectedFocusTopics: Optional[List[str]] = Field(None, description="Array of selected focus topics")
    subjects: List[str] = Field(default_factory=list, description="Subject hints used when no topics are given")


class PresentProductOptionsArgs(BaseModel):
    """Arguments for presentProductOptions"""
    options: List[str] = Field(default_factory=list, max_length=10, description="List of 5-10 potential final product options")
    selectedProductOptions: Optional[List[str]] = Field(
        None, max_length=5, description="Array of 1-5 selected product options"
    )
    subjects: List[str] = Field(default_factory=list, description="Subject hints used when no options are given")


class DefineRequirementsArgs(Requirements):
    """Arguments for defineRequirements"""


class CreateRubricArgs(Rubric):
    """Arguments for createRubric"""


class GenerateFinalJSONArgs(BaseModel):
    """Arguments for generateFinalJSON"""
    finalOutput: str = Field(description="The final formatted JSON output")


class AddAReasoningStepArgs(ReasoningStep):
    """Arguments for addAReasoningStep"""
