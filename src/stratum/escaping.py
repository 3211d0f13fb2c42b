"""HTML escaping shared by the render context and the value wrappers."""

from typing import Union

from markupsafe import escape as _markup_escape

__all__ = ["escape", "escape_attribute", "Escapable"]

Escapable = Union[int, float, str, bool]


def escape(value: Escapable) -> str:
    """Escape a value for safe use in HTML text.

    The value is converted with ``str()`` first, then ``&``, ``<``, ``>``,
    ``"`` and ``'`` are replaced by entities. Objects that implement
    ``__html__`` are trusted and returned as they render themselves.
    Booleans render as ``"True"``/``"False"``, as ``str()`` gives them.

    Example:
        >>> escape("<script>alert(1)</script>")
        '&lt;script&gt;alert(1)&lt;/script&gt;'
    """
    if hasattr(value, "__html__"):
        return str(_markup_escape(value))
    return str(_markup_escape(str(value)))


def escape_attribute(value: str) -> str:
    """Escape a value for use inside a quoted HTML attribute, using HTML5 named entities for quotes."""
    return escape(value).replace("&#34;", "&quot;").replace("&#39;", "&apos;")
