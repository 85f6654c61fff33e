class Tag:
    __slots__ = ("name",)

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"Tag({self.name!r})"


class Attr:
    __slots__ = ("name",)

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"Attr({self.name!r})"


class Text:
    __slots__ = ("data",)

    def __init__(self, data):
        self.data = data if isinstance(data, str) else str(data)

    def __repr__(self):
        return f"Text({self.data!r})"


class Close:
    __slots__ = ()

    def __repr__(self):
        return "Close()"


CLOSE = Close()

# Fallback codes reported by the state machine.
CLOSE_WITHOUT_OPEN_TAG = "close-without-open-tag"
ATTRIBUTE_WITHOUT_TAG = "attribute-without-tag"
UNCLOSED_TAGS = "unclosed-tags"


class StructuralError(Exception):
    """Raised in strict mode when the operation stream cannot nest."""

    def __init__(self, code, depth=None, message=None):
        self.code = code
        self.depth = depth
        self.message = message or code
        super().__init__(str(self))

    def __repr__(self):
        if self.depth is not None:
            return f"StructuralError({self.code!r}, depth={self.depth})"
        return f"StructuralError({self.code!r})"

    def __str__(self):
        if self.message != self.code:
            return f"{self.code} - {self.message}"
        return self.code
