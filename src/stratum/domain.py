"""Domain models used throughout the engine."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class BindingSource(Enum):
    """Where the value for a binding comes from."""

    FETCH = "fetch"
    ESCAPE = "escape"
    GLOBAL = "global"


class BindingTarget(Enum):
    """How a resolved value reaches the template unit."""

    SLOT = "slot"
    PARAMETER = "parameter"


@dataclass(frozen=True)
class Inject:
    """Marks an annotated attribute or render parameter for injection.

    Attributes:
        key: The global to look up. Defaults to the slot name.
        escape: Wrap plain string globals in :class:`~stratum.values.Text`.

    Example:
        >>> class Profile(TemplateUnit):
        ...     app: Annotated[AppService, Inject()]
        ...     site: Annotated[str, Inject(key="site_name", escape=True)]
    """

    key: Optional[str] = None
    escape: bool = False


@dataclass(frozen=True)
class Binding:
    """Describes one injectable dependency of a template unit type.

    Attributes:
        slot_name: The attribute or parameter name on the template unit.
        lookup_key: The name of the global that fulfils this binding.
        escape: Whether plain string values are wrapped for HTML escaping.
        declared_type: Dotted name of the declared type, if annotated.
        source: Whether the value is a framework helper or a global.
        target: Whether the value is set as an attribute or passed to the render body.
        optional: Whether the binding may be left unresolved.
    """

    slot_name: str
    lookup_key: str
    escape: bool
    declared_type: Optional[str]
    source: BindingSource = BindingSource.GLOBAL
    target: BindingTarget = BindingTarget.SLOT
    optional: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "slot_name": self.slot_name,
            "lookup_key": self.lookup_key,
            "escape": self.escape,
            "declared_type": self.declared_type,
            "source": self.source.value,
            "target": self.target.value,
            "optional": self.optional,
        }

    @classmethod
    def from_dict(cls, item: dict[str, Any]) -> "Binding":
        return cls(
            item["slot_name"],
            item["lookup_key"],
            bool(item["escape"]),
            item["declared_type"],
            BindingSource(item["source"]),
            BindingTarget(item["target"]),
            bool(item["optional"]),
        )
