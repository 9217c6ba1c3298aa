from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, field


ERROR_MARKER = "An error occurred"

PENDING_STATES = ("partial-call", "call")
RESULT_STATE = "result"


@dataclass(frozen=True)
class PendingResult:
    """Invocation that has not produced a result yet"""


@dataclass(frozen=True)
class ErrorResult:
    """Upstream error marker returned in place of a tool result"""
    message: str


@dataclass(frozen=True)
class TextResult:
    """Plain string result that carries no structured data"""
    text: str


@dataclass(frozen=True)
class StructuredResult:
    """Structured tool output"""
    payload: Dict[str, Any]


ToolResult = Union[PendingResult, ErrorResult, TextResult, StructuredResult]


def classify_result(state: Optional[str], result: Any) -> ToolResult:
    """Turn a raw invocation result into one of the tool result variants"""

    if state in PENDING_STATES or result is None:
        return PendingResult()

    if isinstance(result, str):
        if ERROR_MARKER in result:
            return ErrorResult(message=result)
        if not result:
            return PendingResult()
        return TextResult(text=result)

    if isinstance(result, dict):
        return StructuredResult(payload=result)

    return TextResult(text=str(result))


@dataclass
class NormalizedUpdate:
    """Partial task data extracted from one tool invocation"""
    tool_name: str
    fields: Dict[str, Any] = field(default_factory=dict)
    force_validate: bool = False

    def is_empty(self) -> bool:
        return not self.fields

    def to_dict(self) -> Dict[str, Any]:
        """Task-data fields only; the force flag never leaves the controller"""
        return dict(self.fields)
