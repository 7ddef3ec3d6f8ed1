"""
Text cleanup for content that contractors and clients exchange.

Message replies are stored HTML-escaped because the portal renders them as
markup. Notes and signatures typed on the public estimate/invoice pages are
stored as plain text with any tags removed.
"""

import html
import re
from typing import Optional

import bleach

CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def escape_message_text(value: Optional[str], max_length: int) -> str:
    """
    Trim, length-check and HTML-escape a message body.

    Raises:
        ValueError: If the trimmed text is longer than max_length
    """
    if not value:
        return ""

    text = CONTROL_CHARS.sub("", str(value).strip())
    if len(text) > max_length:
        raise ValueError(f"Reply exceeds maximum length of {max_length} characters")
    return html.escape(text, quote=True)


def strip_markup(value: Optional[str]) -> Optional[str]:
    """Remove every HTML tag, keeping the text between them"""
    if value is None:
        return None
    return bleach.clean(value, tags=[], attributes={}, strip=True).strip()
