"""
System prompt text for each wizard step.

Prompts interpolate whatever task data has accumulated so far; missing
fields render as empty strings.
"""

from typing import Dict, Any, Callable, List, Mapping

from task_wizard.domain.models.session_state import StepNumber, TaskField, FINAL_STEP


PromptGenerator = Callable[[Mapping[str, Any]], str]


ASSISTANT_ROLE = (
    "You are a curriculum design assistant helping educators create performance "
    "tasks for neurodiverse learners."
)

REASONING_INSTRUCTIONS = """
IMPORTANT: Follow this EXACT sequence:

1. First, use addAReasoningStep to analyze what you need to do in this step
2. Then, use addAReasoningStep to explain your approach
3. IMMEDIATELY AFTER your reasoning steps, you MUST use the specified tool below - this is REQUIRED
4. DO NOT provide any direct text response after your reasoning steps - ONLY use the appropriate tool

DO NOT skip step 3. You MUST call the appropriate tool after your reasoning steps.
"""

DEFAULT_PROMPT = (
    "I'm here to help you create a performance task for neurodiverse learners. "
    "Please tell me what subject you'd like to focus on to get started."
)


def _selected_idea(data: Mapping[str, Any]) -> Dict[str, Any]:
    ideas = data.get(TaskField.TASK_IDEAS)
    index = data.get(TaskField.SELECTED_TASK_INDEX)
    if not isinstance(ideas, list) or not isinstance(index, int) or isinstance(index, bool):
        return {}
    if 0 <= index < len(ideas) and isinstance(ideas[index], dict):
        return ideas[index]
    return {}


def _joined(values: Any, separator: str = ", ") -> str:
    if not isinstance(values, list):
        return ""
    return separator.join(str(value) for value in values)


def _field(container: Any, key: str) -> str:
    if isinstance(container, Mapping):
        value = container.get(key)
        return "" if value is None else str(value)
    return ""


def _header() -> str:
    return f"{ASSISTANT_ROLE}\n{REASONING_INSTRUCTIONS}"


def task_ideas_prompt(data: Mapping[str, Any]) -> str:
    return _header() + """
In this step (Step 1 of 6: Task Ideas), propose three distinct GRASPS-aligned task ideas. GRASPS stands for:
- Goal: The challenge or problem to solve
- Role: The student's role in the scenario
- Audience: Who the work is being created for
- Situation: The context/scenario
- Product: What will be created
- Standards: Success criteria

Each idea should have a title and a brief 2-3 sentence description that introduces the task in an engaging way. Make the ideas diverse in subject matter and approach.

AFTER your reasoning steps, you MUST call the proposeTaskIdeas tool to generate three task ideas.
YOU MUST CALL proposeTaskIdeas - it is REQUIRED. Always include 3 complete task ideas with titles and descriptions.

IMPORTANT: Only mark a task as selected when the user explicitly makes a choice like "I like the first one" or "Let's go with idea 2".
Do not mark any task as selected unless the user has made an explicit choice.
When a user does select a task, call proposeTaskIdeas again with both the ideas and the selectedTaskIndex parameter."""


def focus_topics_prompt(data: Mapping[str, Any]) -> str:
    idea = _selected_idea(data)
    return _header() + f"""
Now that the educator has selected a task idea, in this step (Step 2 of 6: Focus Topics), you will provide 8-10 diverse focus topics that students could choose to explore within this task.

The selected task is: "{_field(idea, 'title')}"
Description: "{_field(idea, 'description')}"

Each focus topic should:
- Be concise (1 sentence)
- Be specific enough to guide research
- Allow for multiple perspectives or approaches
- Be accessible to students with diverse learning needs
- Relate clearly to the selected task

IMPORTANT: After showing your reasoning, ONLY use the provideFocusTopics tool to generate the focus topics. DO NOT type the topics directly in your response.

After the user selects one or more topics, include their selections in the selectedFocusTopics parameter of the provideFocusTopics tool. Do not use a separate call."""


def product_options_prompt(data: Mapping[str, Any]) -> str:
    idea = _selected_idea(data)
    return _header() + f"""
Based on the selected task and focus topics, in this step (Step 3 of 6: Product Options), provide 5-10 potential final product options that students could create to demonstrate their learning.

The selected task is: "{_field(idea, 'title')}"
The educator is interested in these focus topics: "{_joined(data.get(TaskField.SELECTED_FOCUS_TOPICS))}"

The product options should:
- Vary in modality (written, visual, audio, digital, physical)
- Accommodate different learning styles and strengths
- Be specific enough to guide creation
- Connect clearly to the task and focus topics
- Be accessible to neurodiverse learners

IMPORTANT: After showing your reasoning, ONLY use the presentProductOptions tool to generate the product options. DO NOT type the options directly in your response.

After the user selects 1-4 product options, include their selections in the selectedProductOptions parameter of the presentProductOptions tool. Do not use a separate call."""


def requirements_prompt(data: Mapping[str, Any]) -> str:
    idea = _selected_idea(data)
    return _header() + f"""
In this step (Step 4 of 6: Requirements), create detailed, accessible student-facing requirements for the performance task. These should explain what students need to do to complete the task successfully.

The selected task is: "{_field(idea, 'title')}"
Focus topics: "{_joined(data.get(TaskField.SELECTED_FOCUS_TOPICS))}"
Product options: "{_joined(data.get(TaskField.SELECTED_PRODUCT_OPTIONS))}"

The requirements should include:
1. An overview paragraph that introduces the task, its purpose, and the big picture
2. A list of 4-8 specific, sequential steps students will take to complete the task
3. Clear, concise language appropriate for neurodiverse learners
4. Specific details about what must be included in their final product

IMPORTANT: After showing your reasoning, ONLY use the defineRequirements tool to provide the requirements. DO NOT type the requirements directly in your response.

Wait for the user to approve or request changes to these requirements before proceeding."""


def rubric_prompt(data: Mapping[str, Any]) -> str:
    idea = _selected_idea(data)
    return _header() + f"""
In this step (Step 5 of 6: Rubric), create a student-facing rubric that clearly defines what success looks like at different levels of performance. This rubric should help students understand how their work will be evaluated.

The selected task is: "{_field(idea, 'title')}"
Focus topics: "{_joined(data.get(TaskField.SELECTED_FOCUS_TOPICS))}"
Product options: "{_joined(data.get(TaskField.SELECTED_PRODUCT_OPTIONS))}"
Requirements overview: "{_field(data.get(TaskField.REQUIREMENTS), 'overview')}"

The rubric should include:
1. A clear title and brief description explaining how the rubric works
2. 2-4 specific skill areas being assessed (e.g., research, analysis, communication)
3. For each skill area, provide specific descriptions for 4 performance levels:
   - Try: Beginning attempts at the skill
   - Relevant: Shows understanding but needs development
   - Accurate: Demonstrates competence
   - Complex: Shows sophisticated mastery

Use language that is clear, specific, and actionable for neurodiverse learners.

IMPORTANT: After showing your reasoning, ONLY use the createRubric tool to generate the rubric. DO NOT type the rubric directly in your response.

Wait for the user to approve or request changes to this rubric before proceeding."""


def final_json_prompt(data: Mapping[str, Any]) -> str:
    idea = _selected_idea(data)
    requirements = data.get(TaskField.REQUIREMENTS)
    rubric = data.get(TaskField.RUBRIC)
    steps = requirements.get("steps") if isinstance(requirements, Mapping) else None
    return _header() + f"""
In this final step (Step 6 of 6: Final Output), generate a structured JSON output that includes all components of the performance task.

The selected task: "{_field(idea, 'title')}"
Description: "{_field(idea, 'description')}"
Focus topics: "{_joined(data.get(TaskField.SELECTED_FOCUS_TOPICS))}"
Product options: "{_joined(data.get(TaskField.SELECTED_PRODUCT_OPTIONS))}"
Requirements overview: "{_field(requirements, 'overview')}"
Requirement steps: "{_joined(steps, chr(10))}"
Rubric title: "{_field(rubric, 'title')}"
Rubric description: "{_field(rubric, 'description')}"

This JSON will be the complete record of the performance task that can be saved and shared with others.

IMPORTANT: After showing your reasoning, ONLY use the generateFinalJSON tool to create the final formatted output. DO NOT type the JSON directly in your response.

Congratulate the user on completing their performance task."""


STEP_PROMPTS: Dict[StepNumber, PromptGenerator] = {
    StepNumber.TASK_IDEAS: task_ideas_prompt,
    StepNumber.FOCUS_TOPICS: focus_topics_prompt,
    StepNumber.PRODUCT_OPTIONS: product_options_prompt,
    StepNumber.REQUIREMENTS: requirements_prompt,
    StepNumber.RUBRIC: rubric_prompt,
    StepNumber.FINAL_JSON: final_json_prompt,
}


def turn_instructions(current_step: int, step_complete: bool, required_tools: List[str]) -> str:
    """Meta-instructions appended to every step prompt"""

    step_specific = ""
    if current_step == StepNumber.TASK_IDEAS:
        step_specific = """
For step 1, you MUST:
1. ALWAYS generate three complete task ideas (title and description for each)
2. Only add a selectedTaskIndex when the user explicitly selects a task
3. NEVER set selectedTaskIndex without providing ideas
"""

    tool_lines = "\n".join(
        f"For step {index}, you MUST call {tool_name} after your reasoning."
        for index, tool_name in enumerate(required_tools[:FINAL_STEP], start=1)
    )

    return f"""
Important: You MUST follow these steps in exact order when responding:
1. Analyze the task using addAReasoningStep (1-2 steps maximum)
2. IMMEDIATELY call the appropriate tool for the current step
3. Do not respond with additional text - ONLY use the tool

Current step: {current_step}
Step completion status: {"complete" if step_complete else "incomplete"}
{step_specific}
{tool_lines}

IMPORTANT: If the user selects a task idea, focus topic, or product option, use the appropriate tool with the selection parameter included.
Do not call the same tool twice in sequence. Include selections directly in the original tool.

CRITICAL: Always end your response with an appropriate tool call - this is MANDATORY.
"""
