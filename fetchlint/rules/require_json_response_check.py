"""require-json-response-check: check Content-Type before response.json()."""
from typing import Set
from tree_sitter import Node

from fetchlint.analyzer.predicates import content_type_check_receiver, is_inside_exception_handler
from fetchlint.analyzer.syntax import (
    NodeKey, argument_at, call_arguments, method_name, method_receiver, node_key, string_value,
    unwrap,
)
from .base import Detector


class JsonResponseCheckDetector(Detector):
    """Flags ``.json()`` on a response whose Content-Type was never checked.

    The check must come first in source order, so this rule reports during the
    traversal. Receivers that cannot be traced back to a call site (function
    parameters, properties) are skipped.
    """

    rule_id = 'require-json-response-check'
    description = 'Require Content-Type check before calling response.json() to prevent parsing errors'
    messages = {
        'missingContentTypeCheck': (
            'Check Content-Type header before calling response.json() to avoid parsing non-JSON responses'
        ),
    }
    enter_handlers = {'call_expression': 'visit_call'}

    def __init__(self, context):
        super().__init__(context)
        self._checked: Set[NodeKey] = set()

    def visit_call(self, node: Node) -> None:
        receiver = content_type_check_receiver(node)
        if receiver is not None:
            site = self.bindings.resolve(receiver)
            if site is not None:
                self._checked.add(node_key(site))
            return

        if method_name(node) != 'json' or call_arguments(node):
            return

        site = self.bindings.resolve(method_receiver(node))
        if site is None or is_inside_exception_handler(node):
            return
        if node_key(site) in self._checked or self._has_json_extension(site):
            return
        self.report(site, 'missingContentTypeCheck', node=node)

    @staticmethod
    def _has_json_extension(site: Node) -> bool:
        # Only a plain string literal qualifies; templates and expressions do not
        url = unwrap(argument_at(site, 0))
        if url is None or url.type != 'string':
            return False
        return string_value(url).endswith('.json')
