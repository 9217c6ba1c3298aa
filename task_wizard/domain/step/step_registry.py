from typing import Dict, Any, Mapping, Optional, Tuple
from dataclasses import dataclass
from types import MappingProxyType

from task_wizard.domain.errors import StepRegistryError
from task_wizard.domain.models.session_state import StepNumber, FIRST_STEP, FINAL_STEP
from task_wizard.domain.step.step_prompts import (
    PromptGenerator, STEP_PROMPTS, DEFAULT_PROMPT, turn_instructions
)
from task_wizard.domain.step.step_validators import StepPredicate, STEP_PREDICATES
from task_wizard.domain.tool.tool_registry import ToolDefinition, ToolRegistry


@dataclass(frozen=True)
class StepDefinition:
    """Static definition of one wizard step"""
    number: StepNumber
    predicate: StepPredicate
    prompt: PromptGenerator
    tools: Mapping[str, ToolDefinition]

    @property
    def primary_tool(self) -> str:
        return next(iter(self.tools))

    def is_complete(self, data: Mapping[str, Any]) -> bool:
        return bool(self.predicate(data))


class StepRegistry:
    """Fixed table of the six wizard steps"""

    def __init__(self, tool_registry: Optional[ToolRegistry] = None):
        self.tool_registry = tool_registry or ToolRegistry()
        self._steps: Tuple[StepDefinition, ...] = tuple(
            self._build_step(number) for number in StepNumber
        )

    def _build_step(self, number: StepNumber) -> StepDefinition:
        predicate = STEP_PREDICATES.get(number)
        if predicate is None:
            raise StepRegistryError(f"Step {int(number)} has no completion predicate", step=int(number))

        prompt = STEP_PROMPTS.get(number)
        if prompt is None:
            raise StepRegistryError(f"Step {int(number)} has no prompt generator", step=int(number))

        tools = self.tool_registry.get_tools_for_step(int(number))
        if len(tools) != 1:
            raise StepRegistryError(
                f"Step {int(number)} must define exactly one primary tool, found {len(tools)}",
                step=int(number)
            )

        return StepDefinition(
            number=number,
            predicate=predicate,
            prompt=prompt,
            tools=MappingProxyType(dict(tools)),
        )

    def get_step(self, step: int) -> Optional[StepDefinition]:
        if isinstance(step, bool) or not isinstance(step, int):
            return None
        if step < FIRST_STEP or step > FINAL_STEP:
            return None
        return self._steps[step - FIRST_STEP]

    @property
    def steps(self) -> Tuple[StepDefinition, ...]:
        return self._steps

    def validate(self, step: int, data: Mapping[str, Any]) -> bool:
        """Whether the given step's exit criteria hold for the task data"""

        definition = self.get_step(step)
        if definition is None:
            return False
        return definition.is_complete(data)

    def system_prompt(self, step: int, data: Mapping[str, Any]) -> str:
        definition = self.get_step(step)
        if definition is None:
            return DEFAULT_PROMPT
        return definition.prompt(data)

    def turn_instructions(self, step: int, step_complete: bool) -> str:
        """Meta-instructions appended after the step prompt on every turn"""

        required_tools = [definition.primary_tool for definition in self.steps]
        return turn_instructions(step, step_complete, required_tools)

    def step_tools(self, step: int) -> Dict[str, ToolDefinition]:
        """The step's own tools plus the universal reasoning tool"""

        if self.get_step(step) is None:
            return self.tool_registry.get_universal_tools()
        return self.tool_registry.get_turn_tools(step)

    def step_for_tool(self, tool_name: str) -> Optional[int]:
        return self.tool_registry.step_for_tool(tool_name)


# Built once at import; the table never changes at runtime
step_registry = StepRegistry()
