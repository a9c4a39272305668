"""require-encoded-query-params: dynamic URLs must encode what they splice in."""
from typing import Iterator, Optional
from tree_sitter import Node

from fetchlint.analyzer.predicates import subtree_contains
from fetchlint.analyzer.syntax import (
    argument_at, is_constructor_call, method_name, named_children, node_text, string_value, unwrap,
)
from .base import Detector

ENCODING_FUNCTION = 'encodeURIComponent'


def concatenation_operands(node: Node) -> Iterator[Node]:
    """Leaves of a ``a + b + c`` tree, left to right."""
    stack = [node]
    while stack:
        current = unwrap(stack.pop())
        if current is None:
            continue
        if current.type == 'binary_expression':
            operator = current.child_by_field_name('operator')
            if operator is not None and operator.type == '+':
                stack.append(current.child_by_field_name('right'))
                stack.append(current.child_by_field_name('left'))
                continue
        yield current


def is_dynamic_string(node: Optional[Node]) -> bool:
    """A template with a substitution, or a ``+`` concatenation with a non-literal part."""
    node = unwrap(node)
    if node is None:
        return False
    if node.type == 'template_string':
        return any(child.type == 'template_substitution' for child in named_children(node))
    if node.type == 'binary_expression':
        operands = list(concatenation_operands(node))
        if len(operands) < 2:
            return False
        return any(string_value(op) is None and op.type != 'number' for op in operands)
    return False


def is_encoding_call(node: Node) -> bool:
    if node.type != 'call_expression':
        return False
    callee = node.child_by_field_name('function')
    return callee is not None and callee.type == 'identifier' and node_text(callee) == ENCODING_FUNCTION


def is_query_builder(node: Node) -> bool:
    """``new URLSearchParams(...)`` or a ``.toString()`` call on a builder."""
    return is_constructor_call(node, 'URLSearchParams') or method_name(node) == 'toString'


class EncodedQueryParamsDetector(Detector):
    """Checks URL arguments built from strings and values.

    With ``require_query_builder`` set (the default), URLs that are only
    encoded by hand are reported as ``preferURLSearchParams``.
    """

    rule_id = 'require-encoded-query-params'
    description = 'Require proper encoding of query parameters in fetch URLs'
    messages = {
        'unsafeQueryParam': (
            'Query parameters should be encoded using encodeURIComponent(), URL, or URLSearchParams '
            'to prevent injection attacks.'
        ),
        'preferURLSearchParams': (
            'Consider using URLSearchParams for building query strings instead of manual concatenation.'
        ),
    }
    enter_handlers = {'call_expression': 'visit_call'}

    def visit_call(self, node: Node) -> None:
        if not self.is_site(node):
            return

        url = unwrap(argument_at(node, 0))
        if not is_dynamic_string(url):
            return
        if subtree_contains(url, is_query_builder):
            return

        encoded = subtree_contains(url, is_encoding_call)
        constructed = subtree_contains(url, lambda n: is_constructor_call(n, 'URL'))

        if not (encoded or constructed):
            self.report(node, 'unsafeQueryParam', node=url)
        elif encoded and self.options.require_query_builder:
            self.report(node, 'preferURLSearchParams', node=url)
