"""Structural helpers over tree-sitter JavaScript/TypeScript nodes.

An unexpected node shape (including tree-sitter ERROR nodes) yields
None/False/empty instead of raising.
"""
from typing import Iterator, List, Optional, Tuple
from tree_sitter import Node

# Node identity inside one pass: (kind, start_byte, end_byte)
NodeKey = Tuple[str, int, int]

FUNCTION_TYPES = {
    'function_declaration',
    'function_expression',
    'function',  # tree-sitter-javascript < 0.20.2
    'arrow_function',
    'method_definition',
    'generator_function_declaration',
    'generator_function',
}

# Expression wrappers that do not change the value they wrap
WRAPPER_TYPES = {
    'parenthesized_expression',
    'as_expression',
    'satisfies_expression',
    'non_null_expression',
}

CONTINUATION_METHODS = {'then', 'catch', 'finally'}


def node_key(node: Node) -> NodeKey:
    """Identity key of a node, stable for the lifetime of one tree."""
    return (node.type, node.start_byte, node.end_byte)


def same_node(a: Optional[Node], b: Optional[Node]) -> bool:
    if a is None or b is None:
        return False
    return node_key(a) == node_key(b)


def node_text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ''
    return node.text.decode('utf-8', errors='replace')


def named_children(node: Optional[Node]) -> List[Node]:
    """Named children without comment nodes."""
    if node is None:
        return []
    return [child for child in node.named_children if child.type != 'comment']


def first_named(node: Optional[Node]) -> Optional[Node]:
    children = named_children(node)
    return children[0] if children else None


def unwrap(node: Optional[Node]) -> Optional[Node]:
    """Strip parentheses and TypeScript type wrappers around an expression."""
    while node is not None and node.type in WRAPPER_TYPES:
        node = first_named(node)
    return node


def unwrap_await(node: Optional[Node]) -> Optional[Node]:
    """Strip wrappers and at most one ``await`` around an expression."""
    node = unwrap(node)
    if node is not None and node.type == 'await_expression':
        node = unwrap(first_named(node))
    return node


def climb(node: Node) -> Tuple[Node, Optional[Node]]:
    """Walk up through wrapper nodes.

    Returns:
        (outermost wrapper around ``node`` or ``node`` itself,
         first ancestor that is not a wrapper)
    """
    child = node
    parent = node.parent
    while parent is not None and parent.type in WRAPPER_TYPES:
        child = parent
        parent = parent.parent
    return child, parent


def call_arguments(call: Node) -> List[Node]:
    """Argument expressions of a call or new expression."""
    args = call.child_by_field_name('arguments')
    if args is None or args.type != 'arguments':
        return []
    return named_children(args)


def argument_at(call: Node, index: int) -> Optional[Node]:
    """The argument at ``index``, or None if absent or behind a spread."""
    args = call_arguments(call)
    for arg in args[:index + 1]:
        if arg.type == 'spread_element':
            return None
    if index < len(args):
        return args[index]
    return None


def member_parts(node: Optional[Node]) -> Tuple[Optional[Node], Optional[str]]:
    """Split ``obj.prop`` into (object node, property name)."""
    if node is None or node.type != 'member_expression':
        return None, None
    obj = node.child_by_field_name('object')
    prop = node.child_by_field_name('property')
    if obj is None or prop is None:
        return None, None
    return obj, node_text(prop)


def method_name(call: Optional[Node]) -> Optional[str]:
    """Property name of a method call ``x.name(...)``."""
    if call is None or call.type != 'call_expression':
        return None
    _, name = member_parts(call.child_by_field_name('function'))
    return name


def method_receiver(call: Node) -> Optional[Node]:
    """Receiver ``x`` of a method call ``x.name(...)``, unwrapped."""
    obj, _ = member_parts(call.child_by_field_name('function'))
    return unwrap(obj)


def is_target_call(node: Optional[Node], target: str = 'fetch') -> bool:
    """True iff node is ``target(...)`` with a bare, unqualified identifier callee."""
    if node is None or node.type != 'call_expression':
        return False
    callee = node.child_by_field_name('function')
    return callee is not None and callee.type == 'identifier' and node_text(callee) == target


def is_continuation_call(node: Optional[Node]) -> bool:
    """True for ``x.then(...)``, ``x.catch(...)`` and ``x.finally(...)``."""
    return method_name(node) in CONTINUATION_METHODS


def is_member_call(node: Optional[Node], object_name: str, method: str) -> bool:
    """True for ``object_name.method(...)`` with a bare identifier object."""
    node = unwrap(node)
    if node is None or node.type != 'call_expression':
        return False
    obj, name = member_parts(node.child_by_field_name('function'))
    return obj is not None and obj.type == 'identifier' and node_text(obj) == object_name and name == method


def is_json_serialization(node: Optional[Node]) -> bool:
    return is_member_call(node, 'JSON', 'stringify')


def is_constructor_call(node: Optional[Node], name: str) -> bool:
    """True for ``new name(...)``."""
    if node is None or node.type != 'new_expression':
        return False
    ctor = node.child_by_field_name('constructor')
    return ctor is not None and ctor.type == 'identifier' and node_text(ctor) == name


def string_value(node: Optional[Node]) -> Optional[str]:
    """Literal value of a string or substitution-free template, else None."""
    node = unwrap(node)
    if node is None:
        return None
    if node.type == 'string':
        return node_text(node)[1:-1]
    if node.type == 'template_string':
        if any(child.type == 'template_substitution' for child in node.named_children):
            return None
        return node_text(node)[1:-1]
    return None


def function_parameters(fn: Node) -> List[Node]:
    """Parameter nodes of a function-like node."""
    single = fn.child_by_field_name('parameter')
    if single is not None:
        return [single]
    return named_children(fn.child_by_field_name('parameters'))


def pattern_names(node: Optional[Node]) -> Iterator[str]:
    """Names bound by a parameter or destructuring pattern."""
    if node is None:
        return
    if node.type in ('identifier', 'shorthand_property_identifier_pattern'):
        yield node_text(node)
    elif node.type == 'assignment_pattern':
        yield from pattern_names(node.child_by_field_name('left'))
    elif node.type in ('required_parameter', 'optional_parameter'):
        yield from pattern_names(node.child_by_field_name('pattern'))
    elif node.type == 'pair_pattern':
        yield from pattern_names(node.child_by_field_name('value'))
    elif node.type in ('object_pattern', 'array_pattern', 'rest_pattern'):
        for child in named_children(node):
            yield from pattern_names(child)
