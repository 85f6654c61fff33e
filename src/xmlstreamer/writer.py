"""Streaming XML writer.

Operations are translated into text as they arrive and written straight to
the sink; only the text of the element or attribute currently being composed
is held back, so escaping sees a whole run of appended fragments at once.
"""

import logging

from .escape import escape
from .machine import WriterState, transition
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

logger = logging.getLogger(__name__)

_OPERATIONS = (Tag, Attr, Text, Close)

_ERROR_MESSAGES = {
    CLOSE_WITHOUT_OPEN_TAG: "close requested with no open tag",
    ATTRIBUTE_WITHOUT_TAG: "attribute opened outside of a start tag",
}


def format_prolog(xml_version="1.0", encoding="UTF-16"):
    return f'<?xml version="{xml_version}" encoding="{encoding}"?>'


class WriterOpts:
    __slots__ = ("encoding", "indent", "prolog", "strict", "xml_version")

    def __init__(self, indent="\t", encoding="UTF-16", xml_version="1.0", prolog=True, strict=False):
        self.indent = indent
        self.encoding = encoding
        self.xml_version = xml_version
        self.prolog = bool(prolog)
        self.strict = bool(strict)


class XMLStreamer:
    """Write XML to `sink` one operation at a time.

    `sink` is borrowed: anything with a ``write(str)`` method that stays
    usable for the writer's whole lifetime. It is never flushed or closed
    here, and write errors propagate to the caller untouched.
    """

    __slots__ = ("_buffer", "_state", "_tags", "_write", "debug", "opts", "sink")

    def __init__(self, sink, opts=None, *, debug=False):
        self.sink = sink
        self.opts = opts or WriterOpts()
        self.debug = bool(debug)
        self._write = sink.write
        self._tags = []
        self._buffer = ""
        self._state = WriterState.IDLE
        if self.opts.prolog:
            self._write(format_prolog(self.opts.xml_version, self.opts.encoding))

    def __repr__(self):
        return f"XMLStreamer(state={self._state.name}, open_tags={self.open_tags!r})"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.finish()
        return False

    @property
    def state(self):
        return self._state

    @property
    def depth(self):
        return len(self._tags)

    @property
    def open_tags(self):
        return tuple(self._tags)

    def submit(self, op):
        """Apply one operation. Values that are not operations append text."""
        if op is Close:
            op = CLOSE
        elif isinstance(op, type) and issubclass(op, _OPERATIONS):
            raise TypeError(f"{op.__name__} needs a name or value; pass an instance, not the class")
        elif not isinstance(op, _OPERATIONS):
            op = Text(op)
        step = transition(self._state, op, self._tags, self._buffer, self.opts.indent)

        if step.error is not None:
            if self.opts.strict:
                raise StructuralError(step.error, depth=len(self._tags), message=_ERROR_MESSAGES[step.error])
            logger.debug("Permissive fallback %s for %r", step.error, op)
        if self.debug:
            logger.debug("%s + %r -> %s, wrote %r", self._state.name, op, step.state.name, step.output)

        if step.output:
            self._write(step.output)
        if step.push is not None:
            self._tags.append(step.push)
        elif step.pop:
            self._tags.pop()
        self._state = step.state
        self._buffer = step.buffer
        return self

    __lshift__ = submit

    def tag(self, name):
        return self.submit(Tag(name))

    def attr(self, name):
        return self.submit(Attr(name))

    def text(self, value):
        return self.submit(Text(value))

    def close(self):
        return self.submit(CLOSE)

    def attribute(self, name, value):
        """Open attribute `name` and give it `value` in one call."""
        return self.attr(name).text(value)

    def element(self, name, /, text=None, **attrs):
        """Write a whole element: start tag, attributes, optional text, end tag.

        `name` is positional-only so `name=` can be passed as an attribute.
        An attribute called `text` has to go through `attribute()`.
        """
        self.tag(name)
        for key, value in attrs.items():
            self.attribute(key, value)
        if text is not None:
            self.text(text)
        return self.close()

    def close_all(self):
        """Close every open tag, innermost first."""
        while self._tags:
            self.close()
        return self

    def finish(self):
        """End the document.

        Text still waiting in the buffer is written out. Tags left open are
        an error in strict mode and a warning otherwise; they are not closed.
        """
        if self._tags:
            names = "/".join(self._tags)
            if self.opts.strict:
                raise StructuralError(
                    UNCLOSED_TAGS,
                    depth=len(self._tags),
                    message=f"{len(self._tags)} tag(s) left open: {names}",
                )
            logger.warning("Document finished with %d unclosed tag(s): %s", len(self._tags), names)
        if self._state == WriterState.TEXT_PENDING:
            self._write(escape(self._buffer))
            self._buffer = ""
            self._state = WriterState.IDLE
        return self
