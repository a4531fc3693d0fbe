"""
Flatten nested JSON lore records into context-labelled text lines.

Every non-empty string leaf becomes one line ``"<label>: <value>"`` where the
label is the chain of object keys leading to it, joined with ``" > "``.
Array positions are not part of the label, numbers/booleans/null carry no
retrievable text and are dropped.
"""

from __future__ import annotations

from typing import Any, List, Set

from silicon_oracle.exceptions import MalformedInput

LABEL_SEPARATOR = " > "
MAX_DEPTH = 64


def _child_label(label: str, key: str) -> str:
    return f"{label}{LABEL_SEPARATOR}{key}" if label else key


class _Flattener:
    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        self.lines: List[str] = []
        self._active: Set[int] = set()

    def visit(self, value: Any, label: str, depth: int) -> None:
        if value is None or isinstance(value, bool):
            return
        if isinstance(value, (int, float)):
            return
        if isinstance(value, str):
            self._visit_string(value, label)
        elif isinstance(value, dict):
            self._visit_container(value.items(), value, label, depth, keyed=True)
        elif isinstance(value, list):
            self._visit_container(((None, item) for item in value), value, label, depth, keyed=False)
        else:
            raise MalformedInput(
                f"Unsupported value of type {type(value).__name__} at '{label}'",
                details={"label": label},
            )

    def _visit_string(self, value: str, label: str) -> None:
        if not value.strip():
            return
        self.lines.append(f"{label}: {value}" if label else value)

    def _visit_container(self, items, container: Any, label: str, depth: int, keyed: bool) -> None:
        if depth >= self.max_depth:
            raise MalformedInput(f"Nesting deeper than {self.max_depth} levels at '{label}'", details={"label": label})
        marker = id(container)
        if marker in self._active:
            raise MalformedInput(f"Circular reference at '{label}'", details={"label": label})

        self._active.add(marker)
        try:
            for key, item in items:
                child_label = _child_label(label, str(key)) if keyed else label
                self.visit(item, child_label, depth + 1)
        finally:
            self._active.discard(marker)


def flatten_document(value: Any, label: str = "", max_depth: int = MAX_DEPTH) -> str:
    """
    Walk a JSON value and return its string leaves as labelled lines.

    ``label`` seeds the context path (e.g. the document name). Raises
    ``MalformedInput`` for cycles, excessive nesting or non-JSON values.
    """
    flattener = _Flattener(max_depth)
    flattener.visit(value, label, 0)
    return "".join(f"{line}\n" for line in flattener.lines)


__all__ = ["flatten_document", "LABEL_SEPARATOR", "MAX_DEPTH"]
