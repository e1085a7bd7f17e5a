"""Errors raised while decoding persisted graphs."""


class GraphFormatError(ValueError):
    """The persisted graph is malformed; nothing is loaded."""
