"""Single-pass pre-order tree walker with per-kind enter/leave hooks."""
from typing import Callable, Dict, Iterator, List, Optional
from tree_sitter import Node

from .syntax import FUNCTION_TYPES

NodeHandler = Callable[[Node], None]


class TreeWalker:
    """Drives one deterministic pre-order traversal of a syntax tree.

    Observers register handlers per node kind; handlers for the same kind run
    in registration order. Leave handlers run once the whole subtree of the
    node has been visited. Exit handlers run after the traversal ends.
    """

    def __init__(self):
        self._enter: Dict[str, List[NodeHandler]] = {}
        self._leave: Dict[str, List[NodeHandler]] = {}
        self._exit: List[Callable[[], None]] = []

    def on_enter(self, kind: str, handler: NodeHandler) -> None:
        self._enter.setdefault(kind, []).append(handler)

    def on_leave(self, kind: str, handler: NodeHandler) -> None:
        self._leave.setdefault(kind, []).append(handler)

    def on_exit(self, handler: Callable[[], None]) -> None:
        """Register a callback for the end of the unit."""
        self._exit.append(handler)

    def walk(self, root: Node) -> None:
        """Visit every node under ``root`` exactly once, left to right.

        Uses an explicit stack so deeply nested sources cannot hit the
        interpreter recursion limit.
        """
        # (node, leaving) pairs; children pushed in reverse for source order
        stack = [(root, False)]

        while stack:
            node, leaving = stack.pop()

            if leaving:
                for handler in self._leave.get(node.type, ()):
                    handler(node)
                continue

            for handler in self._enter.get(node.type, ()):
                handler(node)

            if node.type in self._leave:
                stack.append((node, True))
            for child in reversed(node.children):
                stack.append((child, False))

        for handler in self._exit:
            handler()


def ancestors(node: Node) -> Iterator[Node]:
    """Yield the parent chain of ``node``, innermost first."""
    current = node.parent
    while current is not None:
        yield current
        current = current.parent


def enclosing(node: Node, kinds, stop_at_function: bool = False) -> Optional[Node]:
    """Nearest ancestor whose kind is in ``kinds``."""
    for ancestor in ancestors(node):
        if ancestor.type in kinds:
            return ancestor
        if stop_at_function and ancestor.type in FUNCTION_TYPES:
            return None
    return None


def following_siblings(node: Node) -> Iterator[Node]:
    """Named siblings after ``node`` in its parent, skipping comments."""
    current = node.next_named_sibling
    while current is not None:
        if current.type != 'comment':
            yield current
        current = current.next_named_sibling
