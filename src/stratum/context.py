"""Per-render state: data, output frames, sections and the pending layout."""

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional

from stratum.errors import SectionError, TemplateError
from stratum.escaping import Escapable, escape
from stratum.helpers import Escape, Fetch
from stratum.sections import SectionMode, SectionStack

if TYPE_CHECKING:
    from stratum.engine import Engine

__all__ = ["RenderContext"]

logger = logging.getLogger(__name__)


class RenderContext:
    """Everything one render of one template unit needs.

    Output is collected in an explicit stack of frames. Rendering the unit
    opens one frame, each :meth:`capture` opens another, and so does each open
    section. Every frame opened inside a render is closed again when the
    render ends, whether it returns or raises, so text written by a failing
    body can never reach an enclosing render.
    """

    def __init__(self, engine: "Engine", unit: Any):
        self.engine = engine
        self.unit = unit
        self.sections = SectionStack()
        self.fetch = Fetch(self)
        self.escaper = Escape(self)
        self._data: dict[str, Any] = {}
        self._frames: list[list[str]] = []
        self._layout: Optional[tuple[Any, dict[str, Any]]] = None
        self._section_buffer: Optional[list[str]] = None

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    def assign(self, data: Optional[dict[str, Any]]) -> dict[str, Any]:
        """Merge ``data`` into the context's data; new keys win."""
        if data:
            self._data = {**self._data, **data}
        return self._data

    @property
    def depth(self) -> int:
        return len(self._frames)

    def render(self, data: Optional[dict[str, Any]] = None) -> str:
        """Run the unit's render body and return its output.

        If the body declared a layout, the output is passed through the layout
        chain and the outermost layout's output is returned instead.
        """
        self.assign(data)

        with self.frame() as buffer:
            result = self.engine.injector.invoke(self.unit, self)
            if result is not None:
                buffer.append(str(result))
            if self.sections.open_section is not None:
                raise SectionError(
                    f'The section "{self.sections.open_section}" was started but never stopped.'
                )
            content = "".join(buffer)

        if self._layout is None:
            return content
        return self._render_layout(content)

    @contextmanager
    def frame(self) -> Iterator[list[str]]:
        """Open an output frame and close it, and any frame above it, on exit."""
        depth = len(self._frames)
        buffer: list[str] = []
        self._frames.append(buffer)
        try:
            yield buffer
        finally:
            del self._frames[depth:]

    def capture(self, body: Callable[[], Any]) -> str:
        """Call ``body`` and return everything it wrote, plus its return value if any.

        Raises:
            SectionError: If ``body`` starts a section without stopping it.
        """
        with self.frame() as buffer:
            result = body()
            if result is not None:
                buffer.append(str(result))
            if self._frames[-1] is not buffer:
                raise SectionError(
                    f'The section "{self.sections.open_section}" was started inside a '
                    "capture but not stopped there."
                )
            return "".join(buffer)

    def write(self, *values: Any) -> None:
        if not self._frames:
            raise TemplateError("Nothing is being rendered; write() needs an open output frame")
        self._frames[-1].extend(str(value) for value in values)

    def escape(self, value: Escapable, functions: Optional[str] = None) -> str:
        if functions:
            value = self.batch(value, functions)
        return escape(value)

    def call(self, name: str, *args: Any) -> Any:
        """Call a function registered with the engine."""
        return self.engine.get_function(name).call(self, *args)

    def batch(self, value: Any, functions: str) -> Any:
        """Pipe a value through ``|``-separated functions, left to right.

        Registered template functions are used first; otherwise the name is
        looked up as a ``str`` method, so ``"strip|upper"`` works out of the box.

        Raises:
            TemplateError: If a name is neither registered nor a ``str`` method.
        """
        for name in functions.split("|"):
            if self.engine.does_function_exist(name):
                value = self.call(name, value)
            elif callable(getattr(str, name, None)) and not name.startswith("_"):
                value = getattr(str, name)(str(value))
            else:
                raise TemplateError(f'The batch function could not find the "{name}" function.')
        return value

    # Sections and layouts

    def layout(self, target: Any, data: Optional[dict[str, Any]] = None) -> None:
        """Wrap this render's output in a layout once the body has finished.

        Args:
            target: A template unit, or the name of a registered template.
            data: Data for the layout's render.
        """
        self._layout = (target, dict(data or {}))

    def start(self, name: str) -> bool:
        """Open a section. Returns True if what is written to it will be discarded."""
        return self._open_section(name, None)

    def push(self, name: str) -> bool:
        return self._open_section(name, SectionMode.APPEND)

    def unshift(self, name: str) -> bool:
        return self._open_section(name, SectionMode.PREPEND)

    def stop(self) -> None:
        """Close the open section and commit what was written to it."""
        if self.sections.open_section is None:
            raise SectionError("You must start a section before you can stop it.")
        # The section's frame must be the top frame.
        if not self._frames or self._frames[-1] is not self._section_buffer:
            raise SectionError(
                f'The section "{self.sections.open_section}" must be stopped in the '
                "same capture it was started in."
            )
        buffer = self._frames.pop()
        self._section_buffer = None
        self.sections.commit("".join(buffer))

    end = stop

    def section(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.sections.get(name, default)

    def _open_section(self, name: str, mode: Optional[SectionMode]) -> bool:
        discards = self.sections.open(name, mode)
        self._section_buffer = []
        self._frames.append(self._section_buffer)
        return discards

    def _render_layout(self, content: str) -> str:
        target, data = self._layout
        layout = self.engine.make(target)
        layout.sections.inherit(self.sections, content)
        logger.debug(
            "Rendering layout %s for %s",
            type(layout.unit).__qualname__,
            type(self.unit).__qualname__,
        )
        return layout.render(data)
