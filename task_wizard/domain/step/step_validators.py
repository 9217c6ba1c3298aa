from typing import Dict, Any, Callable, Mapping

from task_wizard.domain.models.session_state import StepNumber, TaskField


StepPredicate = Callable[[Mapping[str, Any]], bool]


def _non_empty_list(value: Any, minimum: int = 1) -> bool:
    return isinstance(value, list) and len(value) >= minimum


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def task_idea_selected(data: Mapping[str, Any]) -> bool:
    """Step 1: an idea has been selected"""
    return data.get(TaskField.SELECTED_TASK_INDEX) is not None


def focus_topics_selected(data: Mapping[str, Any]) -> bool:
    """Step 2: at least one focus topic is selected"""
    return _non_empty_list(data.get(TaskField.SELECTED_FOCUS_TOPICS))


def product_options_selected(data: Mapping[str, Any]) -> bool:
    """Step 3: at least one product option is selected"""
    return _non_empty_list(data.get(TaskField.SELECTED_PRODUCT_OPTIONS), minimum=1)


def requirements_defined(data: Mapping[str, Any]) -> bool:
    """Step 4: an overview and at least three steps"""
    requirements = _mapping(data.get(TaskField.REQUIREMENTS))
    return bool(requirements.get("overview")) and _non_empty_list(requirements.get("steps"), minimum=3)


def rubric_defined(data: Mapping[str, Any]) -> bool:
    """Step 5: a title and at least two criteria"""
    rubric = _mapping(data.get(TaskField.RUBRIC))
    return bool(rubric.get("title")) and _non_empty_list(rubric.get("criteria"), minimum=2)


def final_output_ready(data: Mapping[str, Any]) -> bool:
    """Step 6 is terminal"""
    return True


STEP_PREDICATES: Dict[StepNumber, StepPredicate] = {
    StepNumber.TASK_IDEAS: task_idea_selected,
    StepNumber.FOCUS_TOPICS: focus_topics_selected,
    StepNumber.PRODUCT_OPTIONS: product_options_selected,
    StepNumber.REQUIREMENTS: requirements_defined,
    StepNumber.RUBRIC: rubric_defined,
    StepNumber.FINAL_JSON: final_output_ready,
}
