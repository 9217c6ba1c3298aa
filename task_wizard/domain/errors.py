from typing import List, Optional


class TaskWizardError(Exception):
    """Base error for the task wizard service"""


class ToolValidationError(TaskWizardError):
    """Raised when tool arguments do not match the tool's parameter schema"""

    def __init__(self, tool_name: str, errors: List[str]):
        self.tool_name = tool_name
        self.errors = errors
        super().__init__(f"Invalid arguments for tool {tool_name}: {'; '.join(errors)}")


class ToolExecutionError(TaskWizardError):
    """Raised when a tool executor fails unexpectedly"""

    def __init__(self, tool_name: str, message: str):
        self.tool_name = tool_name
        super().__init__(f"Error executing tool {tool_name}: {message}")


class ToolProcessingError(TaskWizardError):
    """Raised when a tool result handler fails while normalizing a result"""

    def __init__(self, tool_name: str, message: str):
        self.tool_name = tool_name
        super().__init__(f"Error processing tool {tool_name}: {message}")


class StepRegistryError(TaskWizardError):
    """Raised when the step table is incomplete at construction time"""

    def __init__(self, message: str, step: Optional[int] = None):
        self.step = step
        super().__init__(message)
