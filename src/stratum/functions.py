"""Named functions that templates can call through their render context."""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from stratum.errors import ConfigurationError
from stratum.extensions import Extension

if TYPE_CHECKING:
    from stratum.context import RenderContext

__all__ = ["Func", "Functions"]

_VALID_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Func:
    """A template function.

    Attributes:
        name: The name templates call the function by. Must be an identifier.
        callback: The callable invoked with the call's arguments.
    """

    name: str
    callback: Callable[..., Any]

    def __post_init__(self):
        if not _VALID_NAME.match(self.name):
            raise ConfigurationError(f'"{self.name}" is not a valid function name.')
        if not callable(self.callback):
            raise ConfigurationError(f'The callback for function "{self.name}" is not callable.')

    def call(self, context: "RenderContext", *args: Any) -> Any:
        """Invoke the callback.

        When the callback is a method of an :class:`Extension`, the extension's
        ``template`` attribute points at the calling context for the duration
        of the call.
        """
        owner = getattr(self.callback, "__self__", None)
        if not isinstance(owner, Extension):
            return self.callback(*args)

        previous = owner.template
        owner.template = context
        try:
            return self.callback(*args)
        finally:
            owner.template = previous


class Functions:
    """Registry of template functions, keyed by name."""

    def __init__(self):
        self._functions: dict[str, Func] = {}

    def add(self, name: str, callback: Callable[..., Any]) -> Func:
        if self.exists(name):
            raise ConfigurationError(f'The template function name "{name}" is already registered.')
        func = Func(name, callback)
        self._functions[name] = func
        return func

    def remove(self, name: str) -> None:
        if not self.exists(name):
            raise ConfigurationError(f'The template function "{name}" was not found.')
        del self._functions[name]

    def get(self, name: str) -> Func:
        try:
            return self._functions[name]
        except KeyError:
            raise ConfigurationError(f'The template function "{name}" was not found.') from None

    def exists(self, name: str) -> bool:
        return name in self._functions
