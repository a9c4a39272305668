"""prefer-async-await: promise chains on a request read worse than await."""
from tree_sitter import Node

from fetchlint.analyzer.chains import resolve_anchor
from fetchlint.analyzer.syntax import is_continuation_call
from .base import Detector


class PreferAsyncAwaitDetector(Detector):
    """Reports the anchoring call site once, however long its chain is."""

    rule_id = 'prefer-async-await'
    description = 'Prefer async/await over promise chains for fetch requests to improve readability'
    messages = {
        'preferAsyncAwait': (
            'Prefer async/await over promise chains for {target} requests '
            'to improve readability and error handling'
        ),
    }
    enter_handlers = {'call_expression': 'visit_call'}

    def visit_call(self, node: Node) -> None:
        if not is_continuation_call(node):
            return
        anchor = resolve_anchor(node, self.target)
        if anchor is not None:
            self.report(anchor, 'preferAsyncAwait')
