"""Pending-output state machine for the streaming XML writer.

`transition` is pure: given the current pending state, the open tag names,
the accumulated raw text and the next operation, it returns a `Step` that
describes what to write and how the state, tag stack and buffer change.
Nothing here touches a sink.
"""

import enum

from .escape import escape
from .tokens import ATTRIBUTE_WITHOUT_TAG, CLOSE_WITHOUT_OPEN_TAG, Attr, Close, Tag, Text

# Tag opened on behalf of an attribute that has no enclosing start tag.
IMPLICIT_TAG_NAME = "!--"


class WriterState(enum.IntEnum):
    IDLE = 0
    TAG_OPEN = 1
    ATTRIBUTE_OPEN = 2
    TEXT_PENDING = 3


class Step:
    __slots__ = ("buffer", "error", "output", "pop", "push", "state")

    def __init__(self, state, output="", buffer="", push=None, pop=False, error=None):
        self.state = state
        self.output = output
        self.buffer = buffer
        self.push = push
        self.pop = bool(pop)
        self.error = error

    def __repr__(self):
        parts = [self.state.name, repr(self.output)]
        if self.buffer:
            parts.append(f"buffer={self.buffer!r}")
        if self.push is not None:
            parts.append(f"push={self.push!r}")
        if self.pop:
            parts.append("pop")
        if self.error:
            parts.append(f"error={self.error!r}")
        return f"Step({', '.join(parts)})"


def newline(depth, indent="\t"):
    """Line break followed by the indentation of a tag at `depth` (1 = root)."""
    if depth > 1:
        return "\n" + indent * (depth - 1)
    return "\n"


def transition(state, op, tags=(), buffer="", indent="\t"):
    """Compute the step taken by the writer when `op` arrives in `state`.

    `tags` is the stack of open tag names (innermost last) and is never
    modified; the caller applies `Step.push` / `Step.pop` itself.
    """
    if isinstance(op, Text):
        return _append_text(state, op.data, buffer)
    if isinstance(op, Tag):
        return _open_tag(state, op.name, tags, buffer, indent)
    if isinstance(op, Attr):
        return _open_attr(state, op.name, tags, buffer, indent)
    if isinstance(op, Close):
        return _close(state, tags, buffer, indent)
    raise TypeError(f"Unknown writer operation: {op!r}")


def _append_text(state, data, buffer):
    if state == WriterState.TAG_OPEN:
        return Step(WriterState.TEXT_PENDING, ">", buffer=data)
    if state == WriterState.ATTRIBUTE_OPEN:
        # The attribute value is exactly one append.
        return Step(WriterState.TAG_OPEN, escape(buffer + data) + '"')
    return Step(WriterState.TEXT_PENDING, buffer=buffer + data)


def _open_tag(state, name, tags, buffer, indent):
    parts = []
    flushed = False
    if state == WriterState.TAG_OPEN:
        parts.append(">")
    elif state == WriterState.ATTRIBUTE_OPEN:
        parts.append('">')
    elif state == WriterState.TEXT_PENDING:
        parts.append(escape(buffer))
        flushed = True

    if not flushed:
        parts.append(newline(len(tags) + 1, indent))
    parts.append("<")
    parts.append(name)
    return Step(WriterState.TAG_OPEN, "".join(parts), push=name)


def _open_attr(state, name, tags, buffer, indent):
    if state == WriterState.TAG_OPEN:
        return Step(WriterState.ATTRIBUTE_OPEN, f' {name}="')
    if state == WriterState.ATTRIBUTE_OPEN:
        return Step(WriterState.ATTRIBUTE_OPEN, f'" {name}="')

    parts = []
    if state == WriterState.TEXT_PENDING:
        parts.append(escape(buffer))
    opened = _open_tag(WriterState.IDLE, IMPLICIT_TAG_NAME, tags, "", indent)
    parts.append(opened.output)
    parts.append(f' {name}="')
    return Step(
        WriterState.ATTRIBUTE_OPEN,
        "".join(parts),
        push=IMPLICIT_TAG_NAME,
        error=ATTRIBUTE_WITHOUT_TAG,
    )


def _close(state, tags, buffer, indent):
    if state == WriterState.TAG_OPEN:
        return Step(WriterState.IDLE, " />", pop=True)
    if state == WriterState.ATTRIBUTE_OPEN:
        return Step(WriterState.IDLE, '" />', pop=True)

    parts = []
    if state == WriterState.TEXT_PENDING:
        parts.append(escape(buffer))
    elif tags:
        parts.append(newline(len(tags), indent))

    if not tags:
        return Step(WriterState.IDLE, "".join(parts), error=CLOSE_WITHOUT_OPEN_TAG)

    parts.append(f"</{tags[-1]}>")
    return Step(WriterState.IDLE, "".join(parts), pop=True)
