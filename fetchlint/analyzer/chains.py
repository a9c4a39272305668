"""Continuation-chain resolution (``fetch(...).then(...).catch(...)``).

Pure functions over the expression subtree; nothing here mutates state or
depends on traversal order.
"""
from typing import Iterator, Optional
from tree_sitter import Node

from .syntax import call_arguments, climb, is_continuation_call, is_target_call, method_name, method_receiver, same_node


def resolve_anchor(call: Node, target: str = 'fetch') -> Optional[Node]:
    """Call site at the root of the continuation chain ending in ``call``.

    Args:
        call: A continuation call such as ``x.then(...)``
        target: Name of the target function

    Returns:
        The anchoring call site, or None when the chain is rooted at anything
        other than a call site
    """
    if not is_continuation_call(call):
        return None

    current = method_receiver(call)
    while current is not None:
        if is_target_call(current, target):
            return current
        if not is_continuation_call(current):
            return None
        current = method_receiver(current)
    return None


def next_continuation(call: Node) -> Optional[Node]:
    """The continuation call chained directly onto ``call``, if any."""
    outer, parent = climb(call)
    if parent is None or parent.type != 'member_expression':
        return None
    if not same_node(parent.child_by_field_name('object'), outer):
        return None
    chained = parent.parent
    if chained is None or not is_continuation_call(chained):
        return None
    if not same_node(chained.child_by_field_name('function'), parent):
        return None
    return chained


def continuations_after(call: Node) -> Iterator[Node]:
    """Continuation calls chained after ``call``, innermost first."""
    current = next_continuation(call)
    while current is not None:
        yield current
        current = next_continuation(current)


def chain_root(call: Node) -> Node:
    """Outermost continuation of the chain containing ``call``."""
    root = call
    for root in continuations_after(call):
        pass
    return root


def is_rejection_handler(call: Node) -> bool:
    """``x.catch(fn)`` or the two-argument form ``x.then(ok, fail)``."""
    name = method_name(call)
    if name == 'catch':
        return True
    if name == 'then':
        return len(call_arguments(call)) >= 2
    return False


def is_terminal_rejection_handler(call: Node) -> bool:
    """A rejection handler followed by nothing but ``.finally(...)`` calls."""
    if not is_rejection_handler(call):
        return False
    return all(method_name(after) == 'finally' for after in continuations_after(call))
