"""Container for services and values shared by every template an engine renders."""

from typing import Any, Iterator, Optional

__all__ = ["GlobalStore"]


class GlobalStore:
    """Mapping of global names to the values injected into template slots.

    The store holds shared references; the engine never copies or mutates the
    values it hands out.
    """

    def __init__(self, values: Optional[dict[str, Any]] = None):
        self._values: dict[str, Any] = dict(values or {})

    def add(self, name: str, value: Any) -> None:
        self._values[name] = value

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def as_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)
