"""Terminal-safe text for fetchlint output.

Report lines carry a few Unicode icons; terminals that cannot encode them
(legacy Windows code pages, ASCII-only CI logs) get ASCII replacements.
"""
import sys
import locale


# Unicode icon -> ASCII fallback, for every icon the CLI prints
ICON_MAP = {
    '✓': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',
    '🔧': '[fix]',
    '🔍': '[scan]',
    '→': '->',
    '•': '*',
    '…': '...',
}

UTF8_ENCODINGS = ('utf-8', 'utf8', 'utf_8')


def detect_terminal_encoding() -> str:
    """Detect the encoding stdout writes with.

    Returns:
        str: Lower-cased encoding name ('utf-8', 'cp1252', 'ascii', ...)
    """
    encoding = getattr(sys.stdout, 'encoding', None)
    if encoding:
        return encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except (ValueError, LookupError):
        return 'ascii'


def is_utf8_capable() -> bool:
    """Check if the terminal can print the Unicode icons."""
    return detect_terminal_encoding() in UTF8_ENCODINGS


def replace_icons(text: str, markup: bool = False) -> str:
    """Replace every known icon in ``text`` with its ASCII fallback.

    Args:
        text: Text potentially containing Unicode icons
        markup: Escape the fallbacks so rich does not read ``[OK]`` as a tag
    """
    for icon, fallback in ICON_MAP.items():
        if markup:
            fallback = fallback.replace("[", "\\[")
        text = text.replace(icon, fallback)
    return text


def sanitize_for_terminal(text: str, markup: bool = False) -> str:
    """Replace Unicode icons with ASCII equivalents if the terminal needs it.

    Args:
        text: Text potentially containing Unicode icons
        markup: The text will be rendered as rich markup

    Returns:
        str: Text safe for the current terminal
    """
    if is_utf8_capable():
        return text
    return replace_icons(text, markup)
