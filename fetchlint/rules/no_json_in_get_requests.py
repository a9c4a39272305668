"""no-json-in-get-requests: GET/HEAD/OPTIONS must not carry a JSON body."""
from tree_sitter import Node

from fetchlint.analyzer.predicates import (
    find_property, get_property_value, has_dynamic_entry, is_object_literal, property_value,
)
from fetchlint.analyzer.syntax import argument_at, is_json_serialization, string_value, unwrap
from .base import Detector

GET_LIKE_METHODS = {'GET', 'HEAD', 'OPTIONS'}
DEFAULT_METHOD = 'GET'


class JsonInGetRequestDetector(Detector):
    """Flags a ``JSON.stringify`` body on a request whose method reads as GET.

    A missing ``method`` means GET; a method that is not a string literal
    cannot be decided and the call is skipped.
    """

    rule_id = 'no-json-in-get-requests'
    description = 'Disallow JSON body in GET requests as it violates HTTP semantics'
    messages = {
        'jsonInGetRequest': (
            'GET requests should not include JSON data in the body. Consider using POST, PUT, '
            'or PATCH for requests with data, or move data to query parameters.'
        ),
    }
    enter_handlers = {'call_expression': 'visit_call'}

    def visit_call(self, node: Node) -> None:
        if not self.is_site(node):
            return

        options = argument_at(node, 1)
        if not is_object_literal(options):
            return
        options = unwrap(options)

        method_entry = find_property(options, 'method')
        if method_entry is None:
            if has_dynamic_entry(options):
                return
            method = DEFAULT_METHOD
        else:
            method = string_value(property_value(method_entry))
            if method is None:
                return

        if method.upper() not in GET_LIKE_METHODS:
            return
        if is_json_serialization(get_property_value(options, 'body')):
            self.report(node, 'jsonInGetRequest')
