"""Binding resolved values into template units and invoking their render bodies."""

from typing import TYPE_CHECKING, Any

from stratum.domain import Binding, BindingSource, BindingTarget
from stratum.errors import MissingDependencyError
from stratum.global_store import GlobalStore
from stratum.registry import BindingRegistry
from stratum.values import Text

if TYPE_CHECKING:
    from stratum.context import RenderContext

__all__ = ["TemplateInjector"]

_MISSING = object()


class TemplateInjector:
    """Injects helpers and globals into a template unit, then calls it."""

    def __init__(self, registry: BindingRegistry, global_store: GlobalStore):
        self._registry = registry
        self._global_store = global_store

    def invoke(self, unit: Any, context: "RenderContext") -> Any:
        """Inject ``unit``'s bindings for ``context`` and call its render body.

        Slot values are set as attributes before the call. Parameter values are
        passed positionally in declaration order; once an optional parameter
        has been left out, the ones after it are passed by keyword.

        Returns:
            Whatever the render body returned.

        Raises:
            MissingDependencyError: If a required global is not registered.
        """
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        skipped = False

        for binding in self._registry.resolve(type(unit)):
            value = self._value_for(unit, binding, context)

            if binding.target is BindingTarget.SLOT:
                if value is not _MISSING:
                    # object.__setattr__ also reaches frozen dataclass units.
                    object.__setattr__(unit, binding.slot_name, value)
            elif value is _MISSING:
                skipped = True
            elif skipped:
                kwargs[binding.slot_name] = value
            else:
                args.append(value)

        return unit(*args, **kwargs)

    def _value_for(self, unit: Any, binding: Binding, context: "RenderContext") -> Any:
        if binding.source is BindingSource.FETCH:
            return context.fetch
        if binding.source is BindingSource.ESCAPE:
            return context.escaper

        if binding.lookup_key not in self._global_store:
            if binding.optional:
                return _MISSING
            raise MissingDependencyError(type(unit), binding.slot_name, binding.lookup_key)

        value = self._global_store[binding.lookup_key]
        if binding.escape and isinstance(value, str):
            return Text(value)
        return value
