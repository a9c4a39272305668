"""Reusable structural queries shared by the detectors.

All predicates answer False (or None) for shapes they do not recognise;
none of them raise on malformed subtrees.
"""
from typing import Callable, Iterator, Optional, Sequence, Union
from tree_sitter import Node

from .syntax import (
    FUNCTION_TYPES, call_arguments, member_parts, node_text, same_node,
    pattern_names, string_value, unwrap,
)
from .walker import ancestors, following_siblings

BLOCK_TYPES = {'statement_block', 'program', 'switch_case', 'switch_default', 'class_static_block'}
BLOCK_DECLARATION_TYPES = {'class_declaration', 'function_declaration', 'generator_function_declaration'}


def is_inside_exception_handler(node: Node, include_handler: bool = False) -> bool:
    """True if ``node`` lies in the protected block of an enclosing ``try``.

    Args:
        node: Node to test
        include_handler: Also accept the ``catch`` and ``finally`` regions
    """
    child = node
    for ancestor in ancestors(node):
        if ancestor.type == 'try_statement':
            if same_node(ancestor.child_by_field_name('body'), child):
                return True
            if include_handler and child.type in ('catch_clause', 'finally_clause'):
                return True
        child = ancestor
    return False


def subtree_contains(node: Optional[Node], predicate: Callable[[Node], bool],
                     cross_functions: bool = True,
                     prune: Optional[Callable[[Node], bool]] = None) -> bool:
    """True if ``predicate`` holds for ``node`` or any descendant.

    With ``cross_functions`` off, function nodes (including ``node`` itself)
    are tested but not entered. Subtrees for which ``prune`` holds are
    skipped entirely.
    """
    if node is None:
        return False
    stack = [node]
    while stack:
        current = stack.pop()
        if prune is not None and prune(current):
            continue
        if predicate(current):
            return True
        if not cross_functions and current.type in FUNCTION_TYPES:
            continue
        stack.extend(current.named_children)
    return False


# ----------------------------------------------------------------------
# Sibling checks
# ----------------------------------------------------------------------

def enclosing_statement(node: Node) -> Optional[Node]:
    """The statement containing ``node`` that sits directly in a block."""
    current = node
    for ancestor in ancestors(node):
        if ancestor.type in BLOCK_TYPES:
            return current
        if ancestor.type in FUNCTION_TYPES:
            return None
        current = ancestor
    return None


def is_property_read(node: Node, name: str, property_names) -> bool:
    """``name.prop`` or ``(name).prop`` with prop in ``property_names``."""
    obj, prop = member_parts(node)
    if prop not in property_names:
        return False
    obj = unwrap(obj)
    return obj is not None and obj.type == 'identifier' and node_text(obj) == name


def _declared_names(statement: Node) -> Iterator[str]:
    """Block-scoped names a statement introduces (let/const, class, function)."""
    if statement.type == 'lexical_declaration':
        for declarator in statement.named_children:
            if declarator.type == 'variable_declarator':
                yield from pattern_names(declarator.child_by_field_name('name'))
    elif statement.type in BLOCK_DECLARATION_TYPES:
        name = statement.child_by_field_name('name')
        if name is not None:
            yield node_text(name)


def redeclares(node: Node, name: str) -> bool:
    """True if ``node`` opens a block scope with its own ``name``."""
    if node.type in BLOCK_TYPES:
        return any(name in _declared_names(child) for child in node.named_children)
    if node.type == 'catch_clause':
        return name in pattern_names(node.child_by_field_name('parameter'))
    if node.type == 'for_statement':
        initializer = node.child_by_field_name('initializer')
        return initializer is not None and name in _declared_names(initializer)
    if node.type == 'for_in_statement':
        kind = node.child_by_field_name('kind')
        if kind is None or kind.type == 'var':
            return False
        return name in pattern_names(node.child_by_field_name('left'))
    return False


def _reassigns(node: Node, name: str) -> bool:
    def check(current: Node) -> bool:
        if current.type != 'assignment_expression':
            return False
        left = current.child_by_field_name('left')
        return left is not None and left.type == 'identifier' and node_text(left) == name
    return subtree_contains(node, check, cross_functions=False, prune=lambda n: redeclares(n, name))


def has_sibling_check(origin: Node, name: str, property_names: Sequence[str]) -> bool:
    """Look for ``name.<prop>`` in the statements following ``origin``.

    Scans the remaining statements of the block holding the declaration,
    including conditions and branches of nested conditionals, without
    entering nested functions or nested scopes that declare their own
    ``name``. Scanning stops after a statement that reassigns ``name``.
    """
    statement = enclosing_statement(origin)
    if statement is None:
        return False

    props = set(property_names)
    for sibling in following_siblings(statement):
        if subtree_contains(sibling, lambda n: is_property_read(n, name, props),
                            cross_functions=False, prune=lambda n: redeclares(n, name)):
            return True
        if _reassigns(sibling, name):
            return False
    return False


# ----------------------------------------------------------------------
# Object-literal options
# ----------------------------------------------------------------------

def is_object_literal(node: Optional[Node]) -> bool:
    node = unwrap(node)
    return node is not None and node.type == 'object'


def property_key(entry: Node) -> Optional[str]:
    """Static key of an object entry, or None for computed/spread entries."""
    if entry.type == 'shorthand_property_identifier':
        return node_text(entry)
    if entry.type != 'pair':
        return None
    key = entry.child_by_field_name('key')
    if key is None:
        return None
    if key.type in ('property_identifier', 'identifier', 'number'):
        return node_text(key)
    if key.type == 'string':
        return string_value(key)
    return None


def property_value(entry: Node) -> Optional[Node]:
    if entry.type == 'shorthand_property_identifier':
        return entry
    return entry.child_by_field_name('value')


def object_entries(obj: Optional[Node]):
    """Entries of an object literal (pairs, shorthands, spreads, methods)."""
    obj = unwrap(obj)
    if obj is None or obj.type != 'object':
        return []
    return [child for child in obj.named_children if child.type != 'comment']


def find_property(obj: Optional[Node], key: str) -> Optional[Node]:
    """Entry whose key matches ``key`` case-insensitively (last one wins)."""
    wanted = key.lower()
    found = None
    for entry in object_entries(obj):
        entry_key = property_key(entry)
        if entry_key is not None and entry_key.lower() == wanted:
            found = entry
    return found


def is_dynamic_entry(entry: Node) -> bool:
    """Spread element or an entry whose key is computed (`[key]: value`)."""
    if entry.type == 'spread_element':
        return True
    if entry.type in ('pair', 'method_definition'):
        key = entry.child_by_field_name('key') or entry.child_by_field_name('name')
        return key is not None and key.type == 'computed_property_name'
    return False


def has_dynamic_entry(obj: Optional[Node]) -> bool:
    """True if some entry of ``obj`` may carry a key we cannot read statically."""
    return any(is_dynamic_entry(entry) for entry in object_entries(obj))


def get_property_value(options: Optional[Node], path: Union[str, Sequence[str]]) -> Optional[Node]:
    """Follow a key path through nested object literals.

    Args:
        options: Object literal to start from
        path: Single key or sequence of keys, matched case-insensitively

    Returns:
        Value node at the end of the path, or None if any step is missing
    """
    if isinstance(path, str):
        path = (path,)

    current = options
    for key in path:
        entry = find_property(current, key)
        if entry is None:
            return None
        current = property_value(entry)
    return current


def has_property_in_options(options: Optional[Node], path: Union[str, Sequence[str]],
                            matcher: Optional[Callable[[str], bool]] = None) -> bool:
    """True if ``path`` exists in ``options`` and its literal satisfies ``matcher``.

    Without a matcher only presence is tested. With one, the value must be a
    string literal and ``matcher(value)`` must be truthy.
    """
    value = get_property_value(options, path)
    if value is None:
        return False
    if matcher is None:
        return True
    literal = string_value(value)
    return literal is not None and bool(matcher(literal))


# ----------------------------------------------------------------------
# Response header checks
# ----------------------------------------------------------------------

def content_type_check_receiver(call: Node) -> Optional[Node]:
    """Receiver ``x`` of ``x.headers.get('content-type')``, else None."""
    if call.type != 'call_expression':
        return None
    getter, method = member_parts(call.child_by_field_name('function'))
    if method != 'get':
        return None
    receiver, headers = member_parts(unwrap(getter))
    if headers != 'headers' or receiver is None:
        return None
    args = call_arguments(call)
    if not args:
        return None
    header = string_value(args[0])
    if header is None or header.lower() != 'content-type':
        return None
    return unwrap(receiver)
