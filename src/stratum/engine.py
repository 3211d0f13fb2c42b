"""The engine: template API and environment settings storage.

Usage::

    engine = Engine(EngineConfig(cache_dir=Path("var/cache/templates")))
    engine.add_global("app", AppService(name="Demo"))

    html = engine.render(Profile(user=user))
"""

import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

from stratum.config import EngineConfig
from stratum.context import RenderContext
from stratum.data import SharedData
from stratum.discovery import (
    Directory,
    Folders,
    Name,
    NameAndFolderResolver,
    TemplatePathResolver,
    Theme,
    ThemeResolver,
)
from stratum.errors import ConfigurationError, TemplateNotFound
from stratum.extensions import Extension
from stratum.functions import Func, Functions
from stratum.global_store import GlobalStore
from stratum.injector import TemplateInjector
from stratum.registry import BindingRegistry, type_key

__all__ = ["Engine"]

logger = logging.getLogger(__name__)

TemplateTarget = Union[str, Any]


class Engine:
    """Renders template units and holds everything they share.

    Args:
        config: Engine settings. Defaults to :meth:`EngineConfig.from_env`.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config if config is not None else EngineConfig.from_env()
        self.globals = GlobalStore()
        self.registry = BindingRegistry(self.config.cache_dir)
        self.injector = TemplateInjector(self.registry, self.globals)
        self.functions = Functions()
        self.shared_data = SharedData()
        self.directory = Directory(self.config.directory)
        self.folders = Folders()
        self.file_extension = self.config.file_extension
        self._templates: dict[str, Callable[[], Any]] = {}
        self._path_resolver: TemplatePathResolver = NameAndFolderResolver()

    # Rendering

    def make(self, template: TemplateTarget, data: Optional[dict[str, Any]] = None) -> RenderContext:
        """Create the render context for a template without rendering it.

        Args:
            template: A template unit, or the name of a registered template.
            data: Extra data, layered over any data preassigned with :meth:`add_data`.
        """
        if isinstance(template, str):
            unit = self._template_factory(template)()
            data_key = template
        else:
            unit = template
            data_key = type_key(type(unit))

        context = RenderContext(self, unit)
        context.assign(self.shared_data.get(data_key))
        context.assign(data)
        return context

    def render(self, template: TemplateTarget, data: Optional[dict[str, Any]] = None) -> str:
        """Render a template unit, or a registered template by name, to a string."""
        return self.make(template, data).render()

    # Globals

    def add_global(self, name: str, value: Any) -> "Engine":
        """Make a service or value available for injection into every template."""
        self.globals.add(name, value)
        return self

    def get_global(self, name: str) -> Any:
        return self.globals.get(name)

    def get_globals(self) -> dict[str, Any]:
        return self.globals.as_dict()

    # Binding cache

    def clear_cache(self) -> None:
        self.registry.clear_cache()
        logger.info("Cleared template binding cache")

    def warm_cache(self, unit_types: Iterable[type]) -> None:
        """Resolve the bindings of ``unit_types`` ahead of the first render."""
        self.registry.warm_cache(unit_types)

    # Named templates

    def add_template(self, name: str, factory: Callable[[], Any]) -> "Engine":
        """Register a zero-argument factory (often a class) under a template name.

        Named templates can be rendered by name and used as layouts.
        """
        if not name:
            raise ConfigurationError("The template name cannot be empty.")
        if name in self._templates:
            raise ConfigurationError(f'The template name "{name}" is already registered.')
        self._templates[name] = factory
        return self

    def remove_template(self, name: str) -> "Engine":
        if name not in self._templates:
            raise ConfigurationError(f'The template "{name}" was not found.')
        del self._templates[name]
        return self

    def _template_factory(self, name: str) -> Callable[[], Any]:
        try:
            return self._templates[name]
        except KeyError:
            raise TemplateNotFound(
                name,
                sorted(self._templates),
                f'The template "{name}" is not registered.',
            ) from None

    # Preassigned data

    def add_data(
        self, data: dict[str, Any], templates: Union[None, str, type, Iterable[Union[str, type]]] = None
    ) -> "Engine":
        """Preassign data to all templates, or to the given names or unit types."""
        if templates is not None:
            if isinstance(templates, (str, type)):
                templates = [templates]
            templates = [_data_key(t) for t in templates]
        self.shared_data.add(data, templates)
        return self

    def get_data(self, template: Union[None, str, type] = None) -> dict[str, Any]:
        return self.shared_data.get(None if template is None else _data_key(template))

    # Functions and extensions

    def register_function(self, name: str, callback: Callable[..., Any]) -> "Engine":
        self.functions.add(name, callback)
        logger.debug("Registered template function %s", name)
        return self

    def drop_function(self, name: str) -> "Engine":
        self.functions.remove(name)
        return self

    def get_function(self, name: str) -> Func:
        return self.functions.get(name)

    def does_function_exist(self, name: str) -> bool:
        return self.functions.exists(name)

    def load_extension(self, extension: Extension) -> "Engine":
        extension.register(self)
        logger.debug("Loaded extension %s", type(extension).__name__)
        return self

    def load_extensions(self, extensions: Iterable[Extension]) -> "Engine":
        for extension in extensions:
            self.load_extension(extension)
        return self

    # Discovery

    def set_directory(self, path: Optional[Union[str, Path]]) -> "Engine":
        self.directory.set(path)
        return self

    def get_directory(self) -> Optional[Path]:
        return self.directory.get()

    def set_file_extension(self, extension: str) -> "Engine":
        self.file_extension = extension
        return self

    def get_file_extension(self) -> str:
        return self.file_extension

    def add_folder(self, name: str, path: Union[str, Path], fallback: bool = False) -> "Engine":
        self.folders.add(name, path, fallback)
        return self

    def remove_folder(self, name: str) -> "Engine":
        self.folders.remove(name)
        return self

    def set_theme(self, theme: Theme) -> "Engine":
        """Resolve template paths through a theme hierarchy instead of folders."""
        self._path_resolver = ThemeResolver(theme)
        return self

    def resolve_path(self, name: str) -> Path:
        """Return the file a template name maps to.

        Raises:
            TemplateNotFound: With every path that was searched.
        """
        return self._path_resolver(
            Name(name, self.folders, self.directory.get(), self.file_extension)
        )

    def path_exists(self, name: str) -> bool:
        try:
            self.resolve_path(name)
        except TemplateNotFound:
            return False
        return True


def _data_key(template: Union[str, type]) -> str:
    return template if isinstance(template, str) else type_key(template)
