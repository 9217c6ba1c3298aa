from typing import Any, Dict, List, Optional


SAMPLE_IDEAS = [
    {"title": "Ecosystem Field Guide", "description": "Students document a local ecosystem."},
    {"title": "Water Quality Lab", "description": "Students test water samples and report to the city."},
    {"title": "Solar Oven Challenge", "description": "Students design an oven powered by sunlight."},
]


def system_message(session_id: Optional[str] = None) -> Dict[str, Any]:
    content = "You are a task design assistant."
    if session_id:
        content += f"\nSession-ID: {session_id}"
    return {"id": "sys", "role": "system", "content": content}


def user_message(text: str) -> Dict[str, Any]:
    return {"role": "user", "content": text}


def assistant_message(text: str) -> Dict[str, Any]:
    return {"role": "assistant", "content": text}


def tool_message(
    tool_name: str,
    result: Any,
    state: str = "result",
    extra: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    invocations = [{
        "toolCallId": f"call-{tool_name}",
        "toolName": tool_name,
        "state": state,
        "args": {},
        "result": result,
    }]
    return {"role": "assistant", "content": "", "toolInvocations": invocations + (extra or [])}
