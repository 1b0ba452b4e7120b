"""
Canonical parser for field and pool names.

Handles both string ("North,South") and list (["North", "South"]) inputs so we
never silently corrupt labels (e.g. list("A,B") -> ['A', ',', 'B']).
"""
from typing import List, Optional, Union

MAX_POOLS = 8


def parse_names(names: Optional[Union[str, List[str]]]) -> List[str]:
    """
    Normalize stored names to a list of strings.

    - None or "" -> []
    - String (e.g. "A,B") -> split on commas, strip whitespace, drop empties
    - List -> coerce each to str(x).strip(); empties are kept so positions stay aligned
    """
    if names is None:
        return []
    if isinstance(names, str):
        s = names.strip()
        if not s:
            return []
        return [x.strip() for x in s.split(",") if x.strip()]
    if isinstance(names, list):
        return [str(x).strip() if x is not None else "" for x in names]
    return []


def _labels(names: Optional[Union[str, List[str]]], count: int, default_prefix: str) -> List[str]:
    parsed = parse_names(names)
    labels = []
    for i in range(1, count + 1):
        label = parsed[i - 1] if i - 1 < len(parsed) else ""
        labels.append(label or f"{default_prefix} {i}")
    return labels


def field_labels(field_names: Optional[Union[str, List[str]]], num_fields: int) -> List[str]:
    """Display label for every field 1..num_fields, defaulting to 'Field <n>'."""
    return _labels(field_names, num_fields, "Field")


def pool_labels(pool_names: Optional[Union[str, List[str]]], pool_count: int) -> List[str]:
    """Display label for every pool 1..pool_count, defaulting to 'Pool <n>'."""
    return _labels(pool_names, pool_count, "Pool")


def field_label_for_index(field_names: Optional[Union[str, List[str]]], field_index: int) -> str:
    """Return the label for a 1-based field index."""
    labels = parse_names(field_names)
    if labels and 1 <= field_index <= len(labels) and labels[field_index - 1]:
        return labels[field_index - 1]
    return f"Field {field_index}"


def clamp_pool_index(pool_index: Optional[int], pool_count: int) -> int:
    """Pool of a team: null/invalid values fall back into 1..pool_count."""
    try:
        value = int(pool_index) if pool_index is not None else 1
    except (TypeError, ValueError):
        value = 1
    return max(1, min(pool_count, value))
