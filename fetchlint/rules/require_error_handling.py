"""require-error-handling: consumed requests must be able to fail visibly."""
from tree_sitter import Node

from fetchlint.analyzer.chains import is_terminal_rejection_handler, resolve_anchor
from fetchlint.analyzer.predicates import is_inside_exception_handler
from fetchlint.analyzer.syntax import climb
from .base import Detector


class ErrorHandlingDetector(Detector):
    """Flags consumed call sites with neither try/catch nor a terminal .catch().

    A call standing alone as an expression statement, bare or under
    `void`, is fire-and-forget and exempt. The catch may be visited before
    or after the call site (the outermost call of a chain comes first in
    pre-order), so findings are deferred to the end of the unit.
    """

    rule_id = 'require-error-handling'
    description = 'Require error handling for fetch requests to prevent unhandled promise rejections'
    messages = {
        'missingErrorHandling': (
            '{target}() calls should include error handling with try/catch or .catch() '
            'to prevent unhandled promise rejections'
        ),
    }
    enter_handlers = {'call_expression': 'visit_call'}

    def visit_call(self, node: Node) -> None:
        if self.is_site(node):
            if self._is_fire_and_forget(node) or is_inside_exception_handler(node):
                return
            self.defer(node, 'missingErrorHandling')
        elif is_terminal_rejection_handler(node):
            anchor = resolve_anchor(node, self.target)
            if anchor is not None:
                self.satisfy(anchor)

    @staticmethod
    def _is_fire_and_forget(site: Node) -> bool:
        _, parent = climb(site)
        # `void fetch(...);` discards the promise as well
        if parent is not None and parent.type == 'unary_expression':
            operator = parent.child_by_field_name('operator')
            if operator is None or operator.type != 'void':
                return False
            _, parent = climb(parent)
        return parent is not None and parent.type == 'expression_statement'
