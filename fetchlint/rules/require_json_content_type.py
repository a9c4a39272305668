"""require-json-content-type: JSON bodies must be sent as application/json."""
from tree_sitter import Node

from fetchlint.analyzer.fixes import MalformedFixTarget, insert_property
from fetchlint.analyzer.predicates import (
    find_property, get_property_value, has_dynamic_entry, is_object_literal, property_value,
)
from fetchlint.analyzer.syntax import argument_at, is_json_serialization, string_value, unwrap
from .base import Detector

JSON_MEDIA_TYPE = 'application/json'
HEADERS_ENTRY = 'headers: { "Content-Type": "application/json" }'
CONTENT_TYPE_ENTRY = '"Content-Type": "application/json"'


class JsonContentTypeDetector(Detector):
    """Checks the request headers when the body is ``JSON.stringify(...)``.

    Fixable: a missing header is inserted (or a whole headers object when
    there is none). Headers that are not an object literal, or that spread
    another object or use computed keys, cannot be inspected and are skipped.
    """

    rule_id = 'require-json-content-type'
    description = 'Require Content-Type header when sending JSON data with fetch'
    messages = {
        'missingContentType': (
            'Missing Content-Type header when sending JSON data. '
            'Add "Content-Type": "application/json" to headers.'
        ),
        'incorrectContentType': (
            'Incorrect Content-Type header when sending JSON data. Use "application/json".'
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

        if not is_json_serialization(get_property_value(options, 'body')):
            return

        headers_entry = find_property(options, 'headers')
        if headers_entry is None:
            if not has_dynamic_entry(options):
                self._report_missing(node, options, HEADERS_ENTRY)
            return

        headers = unwrap(property_value(headers_entry))
        if not is_object_literal(headers):
            return

        content_type = find_property(headers, 'content-type')
        if content_type is None:
            if not has_dynamic_entry(headers):
                self._report_missing(node, headers, CONTENT_TYPE_ENTRY)
            return

        value = string_value(property_value(content_type))
        if value is None:
            return
        if JSON_MEDIA_TYPE not in value.lower():
            self.report(node, 'incorrectContentType', node=headers)

    def _report_missing(self, site: Node, target: Node, entry: str) -> None:
        try:
            fix = insert_property(target, entry)
        except MalformedFixTarget:
            fix = None
        self.report(site, 'missingContentType', node=target, fix=fix)
