import asyncio
import uuid

import pytest

from task_wizard.domain.errors import TaskWizardError
from task_wizard.domain.models.transcript import ChatMessage
from task_wizard.domain.session.session_controller import SessionController, never_ready
from task_wizard.domain.session.session_id import resolve_session_id
from task_wizard.infrastructure.store.session_store import session_key

from helpers import SAMPLE_IDEAS, system_message, user_message, assistant_message, tool_message


def always_ready(data):
    return True


@pytest.fixture
def controller(store) -> SessionController:
    return SessionController(store)


def test_unknown_session_starts_fresh(controller):
    record = asyncio.run(controller.get_session("missing"))

    assert record.current_step == 1
    assert record.step_complete is False
    assert record.task_data == {}


def test_unreadable_record_starts_fresh(controller, store):
    asyncio.run(store.set(session_key("broken"), {"currentStep": 42, "stepComplete": "maybe"}))

    record = asyncio.run(controller.get_session("broken"))

    assert record.current_step == 1


def test_update_session_merges_fields(controller, store):
    async def scenario():
        await controller.update_session("s1", {"taskData": {"taskIdeas": SAMPLE_IDEAS}})
        await controller.update_session("s1", {"stepComplete": True})
        return await store.get(session_key("s1"))

    stored = asyncio.run(scenario())

    assert stored == {"currentStep": 1, "stepComplete": True, "taskData": {"taskIdeas": SAMPLE_IDEAS}}


def test_deferred_transition(controller):
    async def scenario():
        completed = await controller.advance_if_ready("s1", always_ready)
        advanced = await controller.advance_if_ready("s1", never_ready)
        return completed, advanced

    completed, advanced = asyncio.run(scenario())

    assert (completed.current_step, completed.step_complete) == (1, True)
    assert (advanced.current_step, advanced.step_complete) == (2, False)


def test_predicate_false_leaves_record_unchanged(controller):
    record = asyncio.run(controller.advance_if_ready("s1", never_ready))
    assert (record.current_step, record.step_complete) == (1, False)


def test_complete_step_advances_exactly_one(controller):
    async def scenario():
        await controller.update_session("s1", {"currentStep": 2, "stepComplete": True})
        return await controller.advance_if_ready("s1", always_ready)

    record = asyncio.run(scenario())

    assert (record.current_step, record.step_complete) == (3, False)


def test_final_step_never_advances(controller):
    async def scenario():
        await controller.update_session("s1", {"currentStep": 6, "stepComplete": True})
        first = await controller.advance_if_ready("s1", always_ready)
        second = await controller.advance_if_ready("s1", never_ready)
        return first, second

    first, second = asyncio.run(scenario())

    assert (first.current_step, first.step_complete) == (6, True)
    assert (second.current_step, second.step_complete) == (6, True)


def test_reset_session(controller):
    async def scenario():
        await controller.update_session("s1", {"currentStep": 4})
        deleted = await controller.reset_session("s1")
        return deleted, await controller.get_session("s1")

    deleted, record = asyncio.run(scenario())

    assert deleted is True
    assert record.current_step == 1


def test_empty_transcript_is_rejected(controller):
    with pytest.raises(TaskWizardError):
        asyncio.run(controller.handle_turn([]))


def test_first_turn_offers_step_one_tools(controller):
    turn = asyncio.run(controller.handle_turn([system_message("abc123"), user_message("science")]))

    assert turn.session_id == "abc123"
    assert turn.session.current_step == 1
    assert set(turn.tools) == {"proposeTaskIdeas", "addAReasoningStep"}
    assert "Current step: 1" in turn.system_prompt
    assert turn.update_applied is False
    assert {schema["function"]["name"] for schema in turn.tool_schemas()} == set(turn.tools)


def test_science_walkthrough_advances_one_step_at_a_time(controller):
    base = [system_message("abc123"), user_message("science")]
    ideas_only = tool_message("proposeTaskIdeas", {"ideas": SAMPLE_IDEAS})
    with_selection = tool_message("proposeTaskIdeas", {"ideas": SAMPLE_IDEAS, "selectedTaskIndex": 1})

    async def scenario():
        proposed = await controller.handle_turn(base + [ideas_only, user_message("I like the second one")])
        selected = await controller.handle_turn(
            base + [ideas_only, user_message("I like the second one"), with_selection]
        )
        moved = await controller.handle_turn(
            base + [ideas_only, user_message("I like the second one"), with_selection,
                    assistant_message("Great choice."), user_message("next")]
        )
        return proposed, selected, moved

    proposed, selected, moved = asyncio.run(scenario())

    assert (proposed.session.current_step, proposed.session.step_complete) == (1, False)
    assert proposed.session.task_data["taskIdeas"] == SAMPLE_IDEAS

    assert (selected.session.current_step, selected.session.step_complete) == (1, True)
    assert selected.session.task_data["selectedTaskIndex"] == 1
    assert selected.selected_task == SAMPLE_IDEAS[1]

    # The same idea result is re-extracted at step 2 but cannot complete it
    assert (moved.session.current_step, moved.session.step_complete) == (2, False)
    assert set(moved.tools) == {"provideFocusTopics", "addAReasoningStep"}
    assert "Water Quality Lab" in moved.system_prompt


def test_stale_selection_does_not_complete_next_step(controller):
    focus = tool_message("provideFocusTopics", {
        "focusTopics": ["Pollution", "Habitats"],
        "selectedFocusTopics": ["Habitats"],
        "__forceValidate": True,
    })
    transcript = [system_message("abc123"), user_message("science"), focus]

    async def scenario():
        await controller.update_session("abc123", {
            "currentStep": 2,
            "taskData": {"taskIdeas": SAMPLE_IDEAS, "selectedTaskIndex": 0},
        })
        completed = await controller.handle_turn(transcript)
        moved = await controller.handle_turn(transcript + [user_message("continue")])
        return completed, moved

    completed, moved = asyncio.run(scenario())

    assert (completed.session.current_step, completed.session.step_complete) == (2, True)
    assert (moved.session.current_step, moved.session.step_complete) == (3, False)


def test_error_marker_skips_session_write(controller):
    writes = []
    original = controller.update_session

    async def tracking_update(session_id, partial):
        writes.append(partial)
        await original(session_id, partial)

    controller.update_session = tracking_update

    messages = [
        system_message("abc123"),
        user_message("science"),
        tool_message("proposeTaskIdeas", "An error occurred. Please try again."),
    ]
    turn = asyncio.run(controller.handle_turn(messages))

    assert writes == []
    assert turn.update_applied is False
    assert turn.session.task_data == {}


def test_step_never_decreases_or_skips(controller):
    ideas = tool_message("proposeTaskIdeas", {"ideas": SAMPLE_IDEAS, "selectedTaskIndex": 0})
    focus = tool_message("provideFocusTopics", {"focusTopics": ["A"], "selectedFocusTopics": ["A"]})
    products = tool_message("presentProductOptions", {"productOptions": ["Poster"], "selectedProductOptions": ["Poster"]})
    requirements = tool_message("defineRequirements", {"overview": "Build it", "steps": ["a", "b", "c"]})
    rubric = tool_message("createRubric", {"title": "Rubric", "criteria": [{"skill": "x"}, {"skill": "y"}]})
    final = tool_message("generateFinalJSON", {"finalOutput": "{}"})

    transcript = [system_message("abc123"), user_message("science")]
    steps = []

    async def scenario():
        for result in [ideas, focus, products, requirements, rubric, final]:
            transcript.append(result)
            turn = await controller.handle_turn(transcript)
            steps.append(turn.session.current_step)
            transcript.append(user_message("next"))
            turn = await controller.handle_turn(transcript)
            steps.append(turn.session.current_step)

    asyncio.run(scenario())

    assert steps == [1, 2, 2, 3, 3, 4, 4, 5, 5, 6, 6, 6]
    assert all(later - earlier in (0, 1) for earlier, later in zip(steps, steps[1:]))


def test_session_id_discovery_order():
    marker = ChatMessage(role="system", content="Session-ID: abc-123")
    with_metadata = ChatMessage(role="user", content="hi", metadata={"sessionId": "meta-1"})

    assert resolve_session_id([marker, with_metadata], "header-1") == "abc-123"
    assert resolve_session_id([with_metadata], "header-1") == "meta-1"
    assert resolve_session_id([ChatMessage(role="user", content="hi")], "header-1") == "header-1"

    generated = resolve_session_id([ChatMessage(role="user", content="hi")])
    assert str(uuid.UUID(generated)) == generated


def test_session_marker_is_case_insensitive():
    marker = ChatMessage(role="system", content=[{"type": "text", "text": "SESSION-ID: ABC-123"}])
    assert resolve_session_id([marker]) == "ABC-123"


def test_malformed_invocation_in_history_is_skipped(controller):
    malformed = {
        "role": "assistant",
        "content": "",
        "metadata": "not-an-object",
        "toolInvocations": [{"toolName": None, "state": "result", "args": "raw", "result": {}}],
    }
    messages = [
        system_message("abc123"),
        user_message("science"),
        tool_message("proposeTaskIdeas", {"ideas": SAMPLE_IDEAS}),
        malformed,
        user_message("hello again"),
    ]

    turn = asyncio.run(controller.handle_turn(messages))

    assert turn.session_id == "abc123"
    assert turn.session.task_data == {"taskIdeas": SAMPLE_IDEAS}
    assert turn.session.current_step == 1


def test_lenient_transcript_fields():
    message = ChatMessage.model_validate({
        "role": None,
        "metadata": ["x"],
        "toolInvocations": ["junk", {"toolName": 7, "toolCallId": 3, "state": {}, "args": "raw"}],
    })

    assert message.role == ""
    assert message.metadata is None
    assert len(message.tool_invocations) == 1
    assert message.first_invocation.tool_name is None
    assert message.first_invocation.tool_call_id is None
    assert message.first_invocation.args == "raw"


def test_string_result_revalidates_without_writing_task_data(controller):
    writes = []
    original = controller.update_session

    async def tracking_update(session_id, partial):
        writes.append(partial)
        await original(session_id, partial)

    async def scenario():
        await original("abc123", {"taskData": {"taskIdeas": SAMPLE_IDEAS, "selectedTaskIndex": 2}})
        controller.update_session = tracking_update
        return await controller.handle_turn([
            system_message("abc123"),
            user_message("science"),
            tool_message("proposeTaskIdeas", "Here are your ideas."),
        ])

    turn = asyncio.run(scenario())

    assert writes == [{"stepComplete": True}]
    assert turn.update_applied is True
    assert (turn.session.current_step, turn.session.step_complete) == (1, True)
