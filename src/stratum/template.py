"""Convenience base class for template units.

Any class with a ``__call__`` method can be rendered. Subclassing
:class:`TemplateUnit` adds the child-render and escape helpers as injected
slots, plus shortcuts for capturing output, writing output, sections and
layouts:

    @dataclass
    class Profile(TemplateUnit):
        user: User
        app: Annotated[AppService, Inject()] = injected()

        def __call__(self):
            self.layout(Layout(title=self.user.name))
            self.start("sidebar")
            self.echo("<nav>", self.e(self.app.name), "</nav>")
            self.stop()
            return f"<h1>{self.e(self.user.name)}</h1>"
"""

from dataclasses import field
from typing import Annotated, Any, Callable, Optional

from stratum.context import RenderContext
from stratum.domain import Inject
from stratum.escaping import Escapable
from stratum.helpers import Escape, Fetch
from stratum.values import Slot

__all__ = ["TemplateUnit", "injected"]


def injected() -> Any:
    """Dataclass field for an injected slot: kept out of ``__init__``, ``repr`` and comparisons."""
    return field(init=False, repr=False, compare=False)


class TemplateUnit:
    fetch: Annotated[Fetch, Inject()]
    escaper: Annotated[Escape, Inject()]

    @property
    def context(self) -> RenderContext:
        """The render context of the render currently running this unit."""
        return self.fetch.context

    def render(self, unit: Any, data: Optional[dict[str, Any]] = None) -> str:
        """Render a child template without inheriting this template's data."""
        return self.fetch(unit, data, inherit=False)

    def capture(self, callback: Callable[[], Any]) -> str:
        return self.context.capture(callback)

    def slot(self, callback: Callable[[], Any]) -> Slot:
        """Wrap ``callback`` so it is captured lazily, when a layout renders it."""
        return Slot(lambda: self.capture(callback))

    def echo(self, *values: Any) -> None:
        self.context.write(*values)

    def e(self, value: Escapable, functions: Optional[str] = None) -> str:
        return self.escaper(value, functions)

    def call(self, name: str, *args: Any) -> Any:
        return self.context.call(name, *args)

    def batch(self, value: Any, functions: str) -> Any:
        return self.context.batch(value, functions)

    # Sections and layouts

    def layout(self, target: Any, data: Optional[dict[str, Any]] = None) -> None:
        self.context.layout(target, data)

    def start(self, name: str) -> bool:
        return self.context.start(name)

    def push(self, name: str) -> bool:
        return self.context.push(name)

    def unshift(self, name: str) -> bool:
        return self.context.unshift(name)

    def stop(self) -> None:
        self.context.stop()

    def end(self) -> None:
        self.context.stop()

    def section(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.context.section(name, default)
