"""Immutable value wrappers that carry their own escaping policy.

Each wrapper renders itself with ``str()`` and exposes ``__html__`` so that
:func:`stratum.escaping.escape` does not escape its output a second time.

* :class:`Text` - HTML text, escaped.
* :class:`Html` - trusted markup, passed through.
* :class:`Attr` - attribute values, escaped with HTML5 quote entities.
* :class:`Js` - any JSON-serialisable value, encoded for a ``<script>`` block.
* :class:`Slot` - lazily produced content.
"""

import json
import re
from typing import Any, Callable

from stratum.escaping import escape, escape_attribute

__all__ = ["Text", "Html", "Attr", "Js", "Slot"]

# These never appear in JSON outside of string literals.
_JS_REPLACEMENTS = {
    "<": "\\u003C",
    ">": "\\u003E",
    "&": "\\u0026",
    "'": "\\u0027",
}
_JSON_STRING = re.compile(r'"(?:[^"\\]|\\.)*"')
_JSON_ESCAPE = re.compile(r"\\.")


def _hex_quotes(match: "re.Match[str]") -> str:
    body = _JSON_ESCAPE.sub(
        lambda e: "\\u0022" if e.group(0) == '\\"' else e.group(0),
        match.group(0)[1:-1],
    )
    return f'"{body}"'


class _Wrapper:
    __slots__ = ("_value",)

    def __init__(self, value: Any):
        object.__setattr__(self, "_value", value)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __html__(self) -> str:
        return str(self)

    def __eq__(self, other):
        return type(other) is type(self) and other._value == self._value

    def __hash__(self):
        return hash((type(self), self._value))

    def __repr__(self):
        return f"{type(self).__name__}({self._value!r})"

    def raw(self) -> Any:
        """Return the wrapped value without any escaping applied."""
        return self._value


class Text(_Wrapper):
    """User-provided text that is HTML-escaped whenever it is rendered."""

    __slots__ = ()

    def __init__(self, value: Any):
        super().__init__(str(value))

    def __str__(self) -> str:
        return escape(self._value)


class Html(_Wrapper):
    """Trusted markup that is rendered as-is. Never wrap user input in Html."""

    __slots__ = ()

    def __init__(self, value: str):
        super().__init__(str(value))

    def __str__(self) -> str:
        return self._value

    @classmethod
    def trusted(cls, html: str) -> "Html":
        return cls(html)


class Attr(_Wrapper):
    """A value destined for an HTML attribute."""

    __slots__ = ()

    def __init__(self, value: Any):
        super().__init__(str(value))

    def __str__(self) -> str:
        return escape_attribute(self._value)


class Js(_Wrapper):
    """A value encoded as JSON for embedding in JavaScript.

    Raises:
        TypeError: If the value cannot be JSON-encoded. Checked at construction.
    """

    __slots__ = ()

    def __init__(self, value: Any):
        json.dumps(value)
        super().__init__(value)

    def __str__(self) -> str:
        encoded = _JSON_STRING.sub(_hex_quotes, json.dumps(self._value))
        for char, replacement in _JS_REPLACEMENTS.items():
            encoded = encoded.replace(char, replacement)
        return encoded

    def __hash__(self):
        return hash((type(self), json.dumps(self._value, sort_keys=True)))


class Slot(_Wrapper):
    """Content produced on demand by a zero-argument callback.

    The callback runs each time the slot is converted to a string, which lets a
    parent template hand a block of content to a layout without rendering it
    up front.
    """

    __slots__ = ()

    def __init__(self, callback: Callable[[], Any]):
        super().__init__(callback)

    def __str__(self) -> str:
        return str(self._value())

    def __call__(self) -> str:
        return str(self)
