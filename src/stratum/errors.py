from typing import Optional

__all__ = [
    "TemplateError",
    "ConfigurationError",
    "TemplateNotFound",
    "MissingDependencyError",
    "SectionError",
]


class TemplateError(Exception):
    """Base class for every error raised by the engine itself."""

    pass


class ConfigurationError(TemplateError):
    """Raised when the engine is set up with an invalid directory, name or registration."""

    pass


class TemplateNotFound(TemplateError):
    """Raised when a template name cannot be resolved.

    Attributes:
        template: The name that was looked up.
        paths: Every candidate path that was tried, in search order.
    """

    def __init__(self, template: str, paths: list[str], message: Optional[str] = None):
        self.template = template
        self.paths = list(paths)
        super().__init__(
            message
            or 'The template "%s" could not be found (searched: %s).'
            % (template, ", ".join(self.paths) or "nothing")
        )


class MissingDependencyError(TemplateError):
    """Raised when a required slot has no global to inject."""

    def __init__(self, unit_type: type, slot_name: str, lookup_key: str):
        self.unit_type = unit_type
        self.slot_name = slot_name
        self.lookup_key = lookup_key
        super().__init__(
            f'Template "{unit_type.__qualname__}" requires "{slot_name}", '
            f'but no global named "{lookup_key}" is registered. '
            f'Register it with engine.add_global("{lookup_key}", ...) '
            f"or declare the slot as Optional."
        )


class SectionError(TemplateError):
    """Raised when sections are started, nested or stopped incorrectly."""

    pass
