"""The two framework helpers a template unit can ask to have injected.

Declare either one as a slot or as a render-body parameter:

    class Profile:
        fetch: Annotated[Fetch, Inject()]

        def __call__(self, e: Escape):
            return e(self.name) + self.fetch(Card(title="About"))
"""

from typing import TYPE_CHECKING, Any, Optional

from stratum.escaping import Escapable

if TYPE_CHECKING:
    from stratum.context import RenderContext

__all__ = ["Fetch", "Escape"]


class Fetch:
    """Renders child templates on behalf of one render context."""

    def __init__(self, context: "RenderContext"):
        self.context = context

    def __call__(
        self,
        unit: Any,
        data: Optional[dict[str, Any]] = None,
        inherit: bool = True,
    ) -> str:
        """Render a child template and return its output.

        Args:
            unit: The child template unit, or the name of a registered template.
            data: Extra data for the child render.
            inherit: Merge the current context's data underneath ``data``.
        """
        data = data or {}
        if inherit:
            data = {**self.context.data, **data}
        return self.context.engine.render(unit, data)


class Escape:
    """Escapes values for HTML on behalf of one render context."""

    def __init__(self, context: "RenderContext"):
        self.context = context

    def __call__(self, value: Escapable, functions: Optional[str] = None) -> str:
        return self.context.escape(value, functions)
