from typing import Dict, Any, List, Optional, TYPE_CHECKING
from dataclasses import dataclass, field
from pydantic import BaseModel, ValidationError

if TYPE_CHECKING:
    from task_wizard.domain.tool.tool_registry import ToolDefinition


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    parameters: Optional[BaseModel] = None


# Parameter validation
class ToolParameterValidator:
    @staticmethod
    def validate_tool_call(tool: "ToolDefinition", parameters: Dict[str, Any]) -> ValidationResult:
        schema = tool.args_schema

        if not isinstance(parameters, dict):
            return ValidationResult(False, [f"Expected an object of arguments, got {type(parameters).__name__}"])

        try:
            parsed = schema.model_validate(parameters)
            return ValidationResult(True, [], parsed)

        except ValidationError as e:
            return ValidationResult(False, [
                f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
                for error in e.errors()
            ])
