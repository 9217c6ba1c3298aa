from typing import Dict, List, Any, Optional, Type
from dataclasses import dataclass
from pydantic import BaseModel
from langchain_core.tools import StructuredTool
from langchain_core.utils.function_calling import convert_to_openai_tool

from task_wizard.domain.models.session_state import StepNumber
from task_wizard.domain.tool.tool_schemas import (
    ToolName, ProposeTaskIdeasArgs, ProvideFocusTopicsArgs, PresentProductOptionsArgs,
    DefineRequirementsArgs, CreateRubricArgs, GenerateFinalJSONArgs, AddAReasoningStepArgs
)
from task_wizard.domain.tool.tool_executor import (
    Executor, ToolExecutor, propose_task_ideas, provide_focus_topics, present_product_options,
    define_requirements, create_rubric, generate_final_json, add_reasoning_step
)


@dataclass(frozen=True)
class ToolDefinition:
    """A tool offered to the model: description, parameter schema and executor"""
    name: ToolName
    description: str
    args_schema: Type[BaseModel]
    executor: Executor
    step: Optional[StepNumber] = None

    @property
    def is_universal(self) -> bool:
        return self.step is None

    def to_structured_tool(self, tool_executor: Optional[ToolExecutor] = None) -> StructuredTool:
        """LangChain tool that validates and executes through the tool executor"""

        tool_name = self.name.value

        async def _run(**kwargs: Any) -> Dict[str, Any]:
            arguments = {
                key: value.model_dump(by_alias=True) if isinstance(value, BaseModel) else value
                for key, value in kwargs.items()
            }
            if tool_executor is None:
                return await self.executor(self.args_schema.model_validate(arguments))
            return await tool_executor.execute_tool(tool_name, arguments)

        return StructuredTool.from_function(
            coroutine=_run,
            name=tool_name,
            description=self.description,
            args_schema=self.args_schema,
        )

    def to_openai_schema(self) -> Dict[str, Any]:
        """Function schema in the OpenAI tool-call format"""

        return convert_to_openai_tool(self.to_structured_tool())


REASONING_TOOL = ToolDefinition(
    name=ToolName.REASONING,
    description="Annotate your reasoning process with step-by-step explanations.",
    args_schema=AddAReasoningStepArgs,
    executor=add_reasoning_step,
)

STEP_TOOLS: List[ToolDefinition] = [
    ToolDefinition(
        name=ToolName.TASK_IDEAS,
        description="Propose three task ideas or choose one from previously proposed ideas.",
        args_schema=ProposeTaskIdeasArgs,
        executor=propose_task_ideas,
        step=StepNumber.TASK_IDEAS,
    ),
    ToolDefinition(
        name=ToolName.FOCUS_TOPICS,
        description="Provide focus topic options based on the selected task and handle selection.",
        args_schema=ProvideFocusTopicsArgs,
        executor=provide_focus_topics,
        step=StepNumber.FOCUS_TOPICS,
    ),
    ToolDefinition(
        name=ToolName.PRODUCT_OPTIONS,
        description="Present final product options and handle selection.",
        args_schema=PresentProductOptionsArgs,
        executor=present_product_options,
        step=StepNumber.PRODUCT_OPTIONS,
    ),
    ToolDefinition(
        name=ToolName.REQUIREMENTS,
        description="Define student-facing requirements.",
        args_schema=DefineRequirementsArgs,
        executor=define_requirements,
        step=StepNumber.REQUIREMENTS,
    ),
    ToolDefinition(
        name=ToolName.RUBRIC,
        description="Create a student-facing rubric.",
        args_schema=CreateRubricArgs,
        executor=create_rubric,
        step=StepNumber.RUBRIC,
    ),
    ToolDefinition(
        name=ToolName.FINAL_JSON,
        description="Generate the final JSON output.",
        args_schema=GenerateFinalJSONArgs,
        executor=generate_final_json,
        step=StepNumber.FINAL_JSON,
    ),
]


class ToolRegistry:
    """Registry of the wizard's tools, grouped by step"""

    def __init__(self, tools: Optional[List[ToolDefinition]] = None):
        self.tools: Dict[str, ToolDefinition] = {}
        self.step_tools: Dict[int, List[str]] = {}
        for tool in tools if tools is not None else STEP_TOOLS + [REASONING_TOOL]:
            self.register_tool(tool)

    def register_tool(self, tool: ToolDefinition):
        """Register a new tool"""

        self.tools[tool.name.value] = tool

        if tool.step is not None:
            self.step_tools.setdefault(int(tool.step), []).append(tool.name.value)

    def get_tool_info(self, tool_name: str) -> Optional[ToolDefinition]:
        """Get a specific tool"""

        return self.tools.get(tool_name)

    def get_tools_for_step(self, step: int) -> Dict[str, ToolDefinition]:
        """Primary tools of one step"""

        tool_names = self.step_tools.get(step, [])
        return {name: self.tools[name] for name in tool_names}

    def get_universal_tools(self) -> Dict[str, ToolDefinition]:
        """Tools offered at every step"""

        return {name: tool for name, tool in self.tools.items() if tool.is_universal}

    def get_turn_tools(self, step: int) -> Dict[str, ToolDefinition]:
        """Tools offered to the model for one turn at the given step"""

        return {**self.get_tools_for_step(step), **self.get_universal_tools()}

    def step_for_tool(self, tool_name: str) -> Optional[int]:
        tool = self.tools.get(tool_name)
        if tool is None or tool.step is None:
            return None
        return int(tool.step)

    def langchain_tools(self, step: int) -> List[StructuredTool]:
        """Executable LangChain tools for the tools of one turn"""

        tool_executor = ToolExecutor(self)
        return [tool.to_structured_tool(tool_executor) for tool in self.get_turn_tools(step).values()]
