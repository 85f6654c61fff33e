"""XML character escaping.

Every markup-significant character is replaced by its predefined named
entity. The same table serves element text and attribute values.
"""

import re

XML_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
}

_ESCAPE_TABLE = str.maketrans(XML_ENTITIES)
_NEEDS_ESCAPE_PATTERN = re.compile(f"[{re.escape(''.join(XML_ENTITIES))}]")


def escape(text):
    """Escape `text` for use as XML character data or a quoted attribute value."""
    if not text:
        return ""
    if _NEEDS_ESCAPE_PATTERN.search(text) is None:
        return text
    return text.translate(_ESCAPE_TABLE)
