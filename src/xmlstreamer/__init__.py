from .escape import escape
from .machine import IMPLICIT_TAG_NAME, Step, WriterState, transition
from .tokens import (
    ATTRIBUTE_WITHOUT_TAG,
    CLOSE,
    CLOSE_WITHOUT_OPEN_TAG,
    UNCLOSED_TAGS,
    Attr,
    Close,
    StructuralError,
    Tag,
    Text,
)
from .writer import WriterOpts, XMLStreamer, format_prolog

__all__ = [
    "ATTRIBUTE_WITHOUT_TAG",
    "CLOSE",
    "CLOSE_WITHOUT_OPEN_TAG",
    "IMPLICIT_TAG_NAME",
    "UNCLOSED_TAGS",
    "Attr",
    "Close",
    "Step",
    "StructuralError",
    "Tag",
    "Text",
    "WriterOpts",
    "WriterState",
    "XMLStreamer",
    "escape",
    "format_prolog",
    "transition",
]
