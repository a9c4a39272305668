"""Binding tracker: maps variable names to the call site that initialized them.

Scopes follow function boundaries. A name declared in an inner function
(variable or parameter) shadows any binding of the same name further out.
Bindings are recorded when the declarator/assignment node is *left*, so every
read visited before that point (including reads inside the initializer) still
sees the previous binding.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from tree_sitter import Node

from .chains import resolve_anchor
from .syntax import (
    FUNCTION_TYPES, argument_at, climb, function_parameters, is_continuation_call,
    is_target_call, method_name, method_receiver, node_text, pattern_names,
    same_node, unwrap_await,
)
from .walker import TreeWalker


@dataclass
class Binding:
    """A variable bound to a call site."""
    name: str
    site: Node
    kind: str  # 'declaration', 'assignment' or 'callback'
    origin: Node  # declarator, assignment or parameter node


@dataclass
class Scope:
    """One function (or the whole unit) worth of names."""
    node: Optional[Node]
    # name -> binding; None marks a declared name that is not bound to a site
    entries: Dict[str, Optional[Binding]] = field(default_factory=dict)


class BindingTracker:
    """Scoped name -> call-site map, updated in source order by the walker."""

    def __init__(self, target_name: str = 'fetch'):
        self.target_name = target_name
        self.root = Scope(node=None)
        self._scopes: List[Scope] = [self.root]
        self._subscribers: List[Callable[[Binding], None]] = []

    def attach(self, walker: TreeWalker) -> None:
        """Register the tracker's hooks. Must run before detectors attach."""
        for kind in FUNCTION_TYPES:
            walker.on_enter(kind, self._enter_function)
            walker.on_leave(kind, self._leave_function)
        walker.on_leave('variable_declarator', self._leave_declarator)
        walker.on_leave('assignment_expression', self._leave_assignment)

    def subscribe(self, callback: Callable[[Binding], None]) -> None:
        """Call ``callback`` with every binding created from now on."""
        self._subscribers.append(callback)

    @property
    def current(self) -> Scope:
        return self._scopes[-1]

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def declare(self, name: str, scope: Optional[Scope] = None) -> None:
        """Declare ``name`` in ``scope`` without binding it to a site."""
        scope = scope or self.current
        scope.entries[name] = None

    def record_binding(self, name: str, site: Node, kind: str, origin: Node,
                       scope: Optional[Scope] = None) -> Binding:
        """Bind ``name`` to ``site`` in ``scope`` (last write wins)."""
        scope = scope or self.current
        binding = Binding(name=name, site=site, kind=kind, origin=origin)
        scope.entries[name] = binding
        for callback in self._subscribers:
            callback(binding)
        return binding

    def lookup(self, name: str) -> Optional[Binding]:
        """Innermost visible binding of ``name``, honouring shadowing."""
        for scope in reversed(self._scopes):
            if name in scope.entries:
                return scope.entries[name]
        return None

    def declaring_scope(self, name: str) -> Optional[Scope]:
        for scope in reversed(self._scopes):
            if name in scope.entries:
                return scope
        return None

    def site_for_initializer(self, value: Optional[Node]) -> Optional[Node]:
        """Call site produced by an initializer, if any.

        Accepts ``fetch(...)``, ``await fetch(...)`` (with optional parentheses)
        and continuation chains rooted at a call site.
        """
        value = unwrap_await(value)
        if value is None:
            return None
        if is_target_call(value, self.target_name):
            return value
        if is_continuation_call(value):
            return resolve_anchor(value, self.target_name)
        return None

    def resolve(self, node: Optional[Node]) -> Optional[Node]:
        """Call site an expression refers to: the call itself or a bound name."""
        node = unwrap_await(node)
        if node is None:
            return None
        if is_target_call(node, self.target_name):
            return node
        if node.type == 'identifier':
            binding = self.lookup(node_text(node))
            if binding is not None:
                return binding.site
        return None

    # ------------------------------------------------------------------
    # Walker hooks
    # ------------------------------------------------------------------

    def _enter_function(self, node: Node) -> None:
        # Resolved against the enclosing scope, before parameters shadow it
        callback_site = self._callback_site(node)

        scope = Scope(node=node)
        self._scopes.append(scope)

        params = function_parameters(node)
        for param in params:
            for name in pattern_names(param):
                self.declare(name)

        if callback_site is not None and params and params[0].type == 'identifier':
            self.record_binding(node_text(params[0]), callback_site, 'callback', params[0])

    def _leave_function(self, node: Node) -> None:
        if len(self._scopes) > 1 and same_node(self.current.node, node):
            self._scopes.pop()

    def _callback_site(self, fn: Node) -> Optional[Node]:
        """Site whose response is passed to ``fn`` as ``site.then(fn)``."""
        outer, parent = climb(fn)
        if parent is None or parent.type != 'arguments':
            return None
        call = parent.parent
        if call is None or method_name(call) != 'then':
            return None
        if not same_node(argument_at(call, 0), outer):
            return None
        return self.resolve(method_receiver(call))

    def _leave_declarator(self, node: Node) -> None:
        name_node = node.child_by_field_name('name')
        if name_node is None:
            return
        if name_node.type != 'identifier':
            for name in pattern_names(name_node):
                self.declare(name)
            return

        name = node_text(name_node)
        site = self.site_for_initializer(node.child_by_field_name('value'))
        if site is not None:
            self.record_binding(name, site, 'declaration', node)
        else:
            self.declare(name)

    def _leave_assignment(self, node: Node) -> None:
        left = node.child_by_field_name('left')
        if left is None or left.type != 'identifier':
            return

        name = node_text(left)
        scope = self.declaring_scope(name)
        site = self.site_for_initializer(node.child_by_field_name('right'))
        if site is not None:
            self.record_binding(name, site, 'assignment', node, scope or self.root)
        elif scope is not None:
            self.declare(name, scope)
