"""Detector base class: one contract validator wired onto the tree walker."""
from typing import Dict, Optional
from tree_sitter import Node

from fetchlint.analyzer.fixes import Fix
from fetchlint.analyzer.syntax import is_target_call
from fetchlint.analyzer.walker import TreeWalker


class Detector:
    """Validates one contract property for every call site of a unit.

    Subclasses declare:
    - rule_id: unique rule identifier (e.g. 'require-timeout')
    - description: one-line summary for ``fetchlint rules``
    - messages: message id -> text; ``{target}`` is replaced by the target name
    - enter_handlers / leave_handlers: node kind -> method name

    One instance is created per unit, so instance attributes are per-unit state.
    """

    rule_id: str = ''
    description: str = ''
    messages: Dict[str, str] = {}
    enter_handlers: Dict[str, str] = {}
    leave_handlers: Dict[str, str] = {}

    def __init__(self, context):
        """
        :param context: The unit's AnalysisContext (options, bindings, sink).
        """
        self.context = context
        self.options = context.options
        self.bindings = context.bindings
        self.sink = context.sink
        self.target = context.options.target_name

    def attach(self, walker: TreeWalker) -> None:
        """Register this detector's handlers for the node kinds it needs."""
        for kind, method in self.enter_handlers.items():
            walker.on_enter(kind, getattr(self, method))
        for kind, method in self.leave_handlers.items():
            walker.on_leave(kind, getattr(self, method))

    def is_site(self, node: Node) -> bool:
        return is_target_call(node, self.target)

    def message(self, message_id: str) -> str:
        return self.messages[message_id].format(target=self.target)

    def report(self, site: Node, message_id: str, node: Optional[Node] = None,
               fix: Optional[Fix] = None) -> bool:
        return self.sink.report(self.rule_id, site, message_id, self.message(message_id), node, fix)

    def defer(self, site: Node, message_id: str, node: Optional[Node] = None) -> None:
        self.sink.defer(self.rule_id, site, message_id, self.message(message_id), node)

    def satisfy(self, site: Node) -> None:
        self.sink.satisfy(self.rule_id, site)
