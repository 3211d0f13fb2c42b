from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from stratum.engine import Engine

__all__ = ["Extension"]


class Extension(ABC):
    """A bundle of template functions registered with an engine in one go.

    Methods registered as functions can read the render context that called
    them from ``self.template``.

    Example:
        >>> class Uri(Extension):
        ...     def register(self, engine):
        ...         engine.register_function("uri", self.uri)
        ...
        ...     def uri(self, path):
        ...         return self.template.data.get("base", "") + path
    """

    template: Optional[Any] = None

    @abstractmethod
    def register(self, engine: "Engine") -> None:
        pass
