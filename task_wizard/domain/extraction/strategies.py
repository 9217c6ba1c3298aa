"""
Ordered extraction strategies for tool result payloads.

Each strategy is a pure function from the result payload to a list, or None
when the payload does not have that shape. The first strategy that returns a
list wins.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence


ListStrategy = Callable[[Mapping[str, Any]], Optional[List[Any]]]


def list_field(key: str) -> ListStrategy:
    """Strategy reading a list stored under ``key``"""

    def strategy(payload: Mapping[str, Any]) -> Optional[List[Any]]:
        value = payload.get(key)
        return list(value) if isinstance(value, list) else None

    strategy.__name__ = f"list_field_{key}"
    return strategy


def object_values(key: str) -> ListStrategy:
    """Strategy converting an object of entries under ``key`` into a list"""

    def strategy(payload: Mapping[str, Any]) -> Optional[List[Any]]:
        value = payload.get(key)
        return list(value.values()) if isinstance(value, Mapping) else None

    strategy.__name__ = f"object_values_{key}"
    return strategy


def first_match(payload: Mapping[str, Any], strategies: Sequence[ListStrategy]) -> Optional[List[Any]]:
    for strategy in strategies:
        found = strategy(payload)
        if found is not None:
            return found
    return None


IDEA_STRATEGIES: Sequence[ListStrategy] = (
    list_field("ideas"),
    list_field("taskIdeas"),
    object_values("ideas"),
)

FOCUS_TOPIC_STRATEGIES: Sequence[ListStrategy] = (
    list_field("topics"),
    list_field("focusTopics"),
)

PRODUCT_OPTION_STRATEGIES: Sequence[ListStrategy] = (
    list_field("options"),
    list_field("productOptions"),
)


def is_valid_idea(entry: Any) -> bool:
    return (
        isinstance(entry, Mapping)
        and isinstance(entry.get("title"), str)
        and isinstance(entry.get("description"), str)
    )


def valid_ideas(entries: Optional[List[Any]]) -> List[Dict[str, Any]]:
    """Keep only ideas with a string title and description"""

    return [dict(entry) for entry in entries or [] if is_valid_idea(entry)]


def non_empty_selection(payload: Mapping[str, Any], key: str) -> Optional[List[Any]]:
    value = payload.get(key)
    if isinstance(value, list) and value:
        return list(value)
    return None
