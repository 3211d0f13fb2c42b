"""Data assigned up front, either to every template or to specific ones."""

from typing import Any, Iterable, Optional, Union

__all__ = ["SharedData"]


class SharedData:
    """Preassigned template data.

    Template-specific data is layered over data shared with all templates.
    Templates are identified by name: a registered template name, or the
    dotted name of a template unit type.
    """

    def __init__(self):
        self._shared: dict[str, Any] = {}
        self._per_template: dict[str, dict[str, Any]] = {}

    def add(
        self, data: dict[str, Any], templates: Union[None, str, Iterable[str]] = None
    ) -> None:
        if templates is None:
            self.share_with_all(data)
        elif isinstance(templates, str):
            self.share_with_some(data, [templates])
        else:
            self.share_with_some(data, templates)

    def share_with_all(self, data: dict[str, Any]) -> None:
        self._shared.update(data)

    def share_with_some(self, data: dict[str, Any], templates: Iterable[str]) -> None:
        for template in templates:
            self._per_template.setdefault(template, {}).update(data)

    def get(self, template: Optional[str] = None) -> dict[str, Any]:
        if template is not None and template in self._per_template:
            return {**self._shared, **self._per_template[template]}
        return dict(self._shared)
