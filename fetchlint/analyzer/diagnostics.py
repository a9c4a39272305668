"""Diagnostic records and the per-unit sink with two-phase reporting."""
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple
from tree_sitter import Node

from .fixes import Fix
from .syntax import NodeKey, node_key


@dataclass
class Diagnostic:
    """One contract violation found in a unit."""
    rule_id: str
    message_id: str
    message: str
    line: int  # 1-based
    column: int  # 1-based, in characters
    start_byte: int
    end_byte: int
    fix: Optional[Fix] = None
    file_path: Optional[str] = None

    @property
    def position(self) -> Tuple[int, int]:
        return (self.line, self.column)


@dataclass
class _Pending:
    node: Node
    message_id: str
    message: str


class DiagnosticSink:
    """Collects diagnostics, at most one per (rule, call site).

    Phase 1 (traversal): detectors either ``report`` right away or ``defer`` a
    finding; observations that prove a contract call ``satisfy``, before or
    after the matching ``defer``. Phase 2 (``flush``): every deferred finding
    that was never satisfied becomes a diagnostic.
    """

    def __init__(self, file_path: Optional[str] = None, source: Optional[bytes] = None):
        """
        Args:
            file_path: Path recorded on every diagnostic
            source: Source bytes of the unit, used to count columns in
                characters; without it columns count bytes
        """
        self.file_path = file_path
        self.source = source
        self.diagnostics: List[Diagnostic] = []
        self._reported: Set[Tuple[str, NodeKey]] = set()
        self._pending: Dict[Tuple[str, NodeKey], _Pending] = {}
        self._satisfied: Set[Tuple[str, NodeKey]] = set()

    def report(self, rule_id: str, site: Node, message_id: str, message: str,
               node: Optional[Node] = None, fix: Optional[Fix] = None) -> bool:
        """Report immediately. Returns False if the site was already reported."""
        key = (rule_id, node_key(site))
        if key in self._reported:
            return False
        self._reported.add(key)
        self._pending.pop(key, None)
        self.diagnostics.append(self._build(rule_id, node or site, message_id, message, fix))
        return True

    def defer(self, rule_id: str, site: Node, message_id: str, message: str,
              node: Optional[Node] = None) -> None:
        """Record a provisional finding for ``site`` (first deferral wins)."""
        key = (rule_id, node_key(site))
        if key in self._reported or key in self._satisfied or key in self._pending:
            return
        self._pending[key] = _Pending(node or site, message_id, message)

    def satisfy(self, rule_id: str, site: Node) -> None:
        """Mark the contract of ``rule_id`` as met for ``site``."""
        key = (rule_id, node_key(site))
        self._satisfied.add(key)
        self._pending.pop(key, None)

    def is_satisfied(self, rule_id: str, site: Node) -> bool:
        return (rule_id, node_key(site)) in self._satisfied

    def flush(self) -> List[Diagnostic]:
        """Report what is still pending and return every diagnostic of the unit."""
        for (rule_id, site_key), pending in self._pending.items():
            if (rule_id, site_key) in self._satisfied:
                continue
            self._reported.add((rule_id, site_key))
            self.diagnostics.append(self._build(rule_id, pending.node, pending.message_id, pending.message, None))
        self._pending.clear()
        return self.diagnostics

    def _build(self, rule_id: str, node: Node, message_id: str, message: str,
               fix: Optional[Fix]) -> Diagnostic:
        row, column = node.start_point
        if self.source is not None:
            line_start = node.start_byte - column
            column = len(self.source[line_start:node.start_byte].decode('utf-8', errors='replace'))
        return Diagnostic(
            rule_id=rule_id,
            message_id=message_id,
            message=message,
            line=row + 1,
            column=column + 1,
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            fix=fix,
            file_path=self.file_path,
        )
