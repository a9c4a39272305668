"""require-status-check: bound responses must have .ok or .status read."""
from tree_sitter import Node

from fetchlint.analyzer.bindings import Binding
from fetchlint.analyzer.predicates import has_sibling_check
from fetchlint.analyzer.syntax import member_parts
from fetchlint.analyzer.walker import TreeWalker
from .base import Detector

STATUS_PROPERTIES = ('ok', 'status')


class StatusCheckDetector(Detector):
    """Flags call sites bound to a variable whose status is never checked.

    Only declarations and assignments count as bindings; a response handed to
    a ``.then`` callback is not, so bare promise chains are left to the
    chain-style and error-handling rules.
    """

    rule_id = 'require-status-check'
    description = 'Require checking response.ok or response.status when using fetch'
    messages = {
        'missingStatusCheck': (
            '{target}() does not throw on HTTP error status. '
            'Check response.ok or response.status before using the response.'
        ),
    }
    enter_handlers = {'member_expression': 'visit_member'}

    def attach(self, walker: TreeWalker) -> None:
        super().attach(walker)
        self.bindings.subscribe(self.binding_created)

    def binding_created(self, binding: Binding) -> None:
        if binding.kind == 'callback':
            return
        if has_sibling_check(binding.origin, binding.name, STATUS_PROPERTIES):
            self.satisfy(binding.site)
            return
        self.defer(binding.site, 'missingStatusCheck')

    def visit_member(self, node: Node) -> None:
        obj, prop = member_parts(node)
        if prop not in STATUS_PROPERTIES:
            return
        # Covers both `response.ok` and `(await fetch(...)).ok`
        site = self.bindings.resolve(obj)
        if site is not None:
            self.satisfy(site)
