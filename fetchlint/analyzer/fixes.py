"""Minimal text splices attached to diagnostics."""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union
from tree_sitter import Node

from .predicates import object_entries
from .syntax import unwrap


class MalformedFixTarget(ValueError):
    """A fix would have to be inserted into something that is not a clean object literal."""


@dataclass(frozen=True)
class Fix:
    """Replace source bytes ``[range_start, range_end)`` with ``replacement_text``."""
    range_start: int
    range_end: int
    replacement_text: str


def insert_property(target: Optional[Node], property_text: str) -> Fix:
    """Build a fix adding ``property_text`` as the last entry of an object literal.

    An empty object is replaced as a whole; otherwise the entry is appended
    after the current last entry, which keeps any trailing comma valid.

    Raises:
        MalformedFixTarget: If ``target`` is not an object literal or contains
            parse errors
    """
    obj = unwrap(target)
    if obj is None or obj.type != 'object':
        raise MalformedFixTarget(f"cannot insert into {obj.type if obj is not None else 'nothing'}")
    if obj.has_error:
        raise MalformedFixTarget("object literal contains syntax errors")

    entries = object_entries(obj)
    if not entries:
        return Fix(obj.start_byte, obj.end_byte, f"{{ {property_text} }}")

    last = entries[-1]
    return Fix(last.end_byte, last.end_byte, f", {property_text}")


def apply_fix(source: Union[str, bytes], fix: Fix) -> Union[str, bytes]:
    """Apply one fix; offsets are byte offsets into the UTF-8 source."""
    return apply_fixes(source, [fix])


def apply_fixes(source: Union[str, bytes], fixes: Iterable[Optional[Fix]]) -> Union[str, bytes]:
    """Apply every non-overlapping fix, back to front.

    Fixes overlapping one already applied are skipped; they can be picked up
    by analysing the result again.
    """
    is_text = isinstance(source, str)
    data = source.encode('utf-8') if is_text else source

    ordered: List[Fix] = sorted((f for f in fixes if f is not None),
                                key=lambda f: (f.range_start, f.range_end), reverse=True)
    boundary = len(data) + 1
    for fix in ordered:
        if fix.range_end > boundary:
            continue
        data = data[:fix.range_start] + fix.replacement_text.encode('utf-8') + data[fix.range_end:]
        boundary = fix.range_start

    return data.decode('utf-8') if is_text else data
