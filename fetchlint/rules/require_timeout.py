"""require-timeout: every request needs an abort signal."""
from typing import Optional
from tree_sitter import Node

from fetchlint.analyzer.predicates import get_property_value, has_dynamic_entry
from fetchlint.analyzer.syntax import call_arguments, is_member_call, member_parts, unwrap
from .base import Detector


def is_timeout_signal(value: Optional[Node]) -> bool:
    """``AbortSignal.timeout(ms)`` or any ``<expr>.signal``.

    The second form is trusted without looking for the timer that aborts the
    controller; a controller that is never aborted slips through.
    """
    value = unwrap(value)
    if value is None:
        return False
    if is_member_call(value, 'AbortSignal', 'timeout'):
        return True
    _, prop = member_parts(value)
    return prop == 'signal'


class TimeoutDetector(Detector):
    """Flags call sites without a timeout signal in their options."""

    rule_id = 'require-timeout'
    description = 'Require timeout configuration for fetch requests to prevent hanging'
    messages = {
        'missingTimeout': '{target}() calls should include timeout configuration to prevent hanging indefinitely',
    }
    enter_handlers = {'call_expression': 'visit_call'}

    def visit_call(self, node: Node) -> None:
        if not self.is_site(node):
            return

        args = call_arguments(node)
        if any(arg.type == 'spread_element' for arg in args[:2]):
            return
        if len(args) < 2:
            self.report(node, 'missingTimeout')
            return

        options = unwrap(args[1])
        if options is None or options.type != 'object':
            return
        signal = get_property_value(options, 'signal')
        if is_timeout_signal(signal):
            return
        # A spread or computed key may carry the signal
        if signal is None and has_dynamic_entry(options):
            return
        self.report(node, 'missingTimeout')
