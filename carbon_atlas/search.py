"""
Node search and input debouncing.

Matching is a case-insensitive substring test against a node's label,
its department, and (for trips) its route.
"""

from __future__ import annotations

import time
from typing import Callable, List, Optional

from .nodes import Node, NodeSet, Trip


def _haystacks(node: Node) -> List[str]:
    out = [node.label, node.department]
    if isinstance(node, Trip):
        out.append(node.route)
    return out


def search_nodes(nodes: NodeSet, term: Optional[str]) -> Optional[List[Node]]:
    """
    Nodes matching ``term``, in node-set order.

    Returns None for a blank term (no search active), which is distinct
    from an empty list (search active, nothing found).
    """
    if term is None or not term.strip():
        return None
    needle = term.strip().lower()
    return [n for n in nodes if any(needle in (h or "").lower() for h in _haystacks(n))]


class SearchDebouncer:
    """
    Holds the latest search input until it has been quiet for ``delay_ms``.

    Every ``push`` supersedes the previous pending term; ``poll`` releases
    the term once the quiet period has elapsed.
    """

    def __init__(self, delay_ms: float = 200.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.delay = float(delay_ms) / 1000.0
        self._clock = clock
        self._term: Optional[str] = None
        self._since = 0.0

    @property
    def pending(self) -> bool:
        return self._term is not None

    def push(self, term: str) -> None:
        self._term = term
        self._since = self._clock()

    def poll(self) -> Optional[str]:
        if self._term is None:
            return None
        if self._clock() - self._since < self.delay:
            return None
        return self.flush()

    def flush(self) -> Optional[str]:
        term, self._term = self._term, None
        return term
