from typing import Dict, Any, List, Optional, Literal
from pydantic import BaseModel, ConfigDict, Field
from enum import IntEnum


FIRST_STEP = 1
FINAL_STEP = 6


class StepNumber(IntEnum):
    """Wizard steps in the order they are completed"""
    TASK_IDEAS = 1
    FOCUS_TOPICS = 2
    PRODUCT_OPTIONS = 3
    REQUIREMENTS = 4
    RUBRIC = 5
    FINAL_JSON = 6


class TaskField:
    """Keys of the accumulated task data"""
    TASK_IDEAS = "taskIdeas"
    SELECTED_TASK_INDEX = "selectedTaskIndex"
    FOCUS_TOPICS = "focusTopics"
    SELECTED_FOCUS_TOPICS = "selectedFocusTopics"
    PRODUCT_OPTIONS = "productOptions"
    SELECTED_PRODUCT_OPTIONS = "selectedProductOptions"
    REQUIREMENTS = "requirements"
    RUBRIC = "rubric"
    FINAL_OUTPUT = "finalOutput"


class TaskIdea(BaseModel):
    """A proposed GRASPS task idea"""
    title: str = Field(description="Task idea title")
    description: str = Field(description="Two or three sentence introduction of the task")


class Requirements(BaseModel):
    """Student-facing requirements"""
    overview: str = Field(description="Overview of the requirements")
    steps: List[str] = Field(min_length=3, max_length=10, description="3-10 bullet-point steps")


class RubricLevels(BaseModel):
    """Performance level descriptions for one skill"""
    model_config = ConfigDict(populate_by_name=True)

    try_: str = Field(alias="try", description="Try level description")
    relevant: str = Field(description="Relevant level description")
    accurate: str = Field(description="Accurate level description")
    complex: str = Field(description="Complex level description")


class RubricCriterion(BaseModel):
    """A skill area assessed by the rubric"""
    skill: str = Field(description="Specific skill being assessed")
    levels: RubricLevels


class Rubric(BaseModel):
    """Student-facing rubric"""
    title: str = Field(description="Rubric title")
    description: Optional[str] = Field(None, description="Rubric description")
    criteria: List[RubricCriterion] = Field(min_length=2, description="Rubric criteria with performance levels")


class ReasoningStep(BaseModel):
    """A transcript-visible reasoning annotation"""
    title: str = Field(description="The title of the reasoning step")
    content: str = Field(description="The content of the reasoning step.")
    nextStep: Literal["continue", "finalAnswer"] = Field(
        description="Whether to continue with another step or provide the final answer"
    )


class SessionRecord(BaseModel):
    """Wizard progress for one conversation"""
    model_config = ConfigDict(populate_by_name=True)

    current_step: int = Field(default=FIRST_STEP, ge=FIRST_STEP, le=FINAL_STEP, alias="currentStep")
    step_complete: bool = Field(default=False, alias="stepComplete")
    task_data: Dict[str, Any] = Field(default_factory=dict, alias="taskData")

    @classmethod
    def fresh(cls) -> "SessionRecord":
        """Record for a session seen for the first time"""
        return cls()

    @property
    def is_final_step(self) -> bool:
        return self.current_step >= FINAL_STEP

    def to_store(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys used in the store"""
        return self.model_dump(by_alias=True, mode="json")

    def get_state_summary(self) -> Dict[str, Any]:
        """Get a summary of the current state"""
        return {
            "current_step": self.current_step,
            "step_complete": self.step_complete,
            "task_fields": sorted(self.task_data.keys()),
        }
