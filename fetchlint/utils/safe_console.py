"""Rich Console that degrades icons to ASCII on non-UTF-8 terminals."""
from rich.console import Console
from typing import Any, Optional
from .logger import is_utf8_capable, replace_icons


class SafeConsole(Console):
    """Console whose print() swaps Unicode icons for ASCII when required.

    Renderables (tables, panels) are passed through untouched; only plain
    string arguments are rewritten.
    """

    def __init__(self, *args, ascii_only: Optional[bool] = None, **kwargs):
        """
        Args:
            ascii_only: Force (True) or disable (False) icon replacement;
                None detects it from the terminal encoding
            *args, **kwargs: Passed through to rich's Console
        """
        self.ascii_only = (not is_utf8_capable()) if ascii_only is None else ascii_only
        super().__init__(*args, **kwargs)

    def print(self, *objects: Any, **kwargs) -> None:
        if self.ascii_only:
            markup = kwargs.get('markup')
            if markup is None:
                markup = self._markup
            objects = tuple(
                replace_icons(obj, markup) if isinstance(obj, str) else obj
                for obj in objects
            )
        super().print(*objects, **kwargs)
