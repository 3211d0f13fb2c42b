"""Discovery and caching of the injectable bindings declared by template unit types.

Bindings are resolved through three tiers:

1. an in-memory cache keyed by the unit type,
2. an optional JSON file per type in a cache directory (production),
3. a scan of the type's annotations and render-body signature.

A unit type declares slots with ``Annotated[T, Inject()]`` class annotations and
may also take helpers or globals as parameters of its ``__call__`` method.
"""

import hashlib
import inspect
import json
import logging
import os
import tempfile
import types
from pathlib import Path
from typing import (
    Annotated,
    Any,
    Iterable,
    Optional,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from stratum.domain import Binding, BindingSource, BindingTarget, Inject
from stratum.errors import TemplateError
from stratum.helpers import Escape, Fetch

__all__ = ["BindingRegistry", "scan_bindings", "type_key"]

logger = logging.getLogger(__name__)

CACHE_FILE_PREFIX = "stratum_"

_NONE_TYPE = type(None)


class BindingRegistry:
    """Resolves and caches the bindings of template unit types.

    Args:
        cache_dir: Directory for the persistent cache. ``None`` keeps the cache in memory only.
    """

    def __init__(self, cache_dir: Optional[Path] = None):
        self.cache_dir = Path(cache_dir) if cache_dir is not None else None
        self._cache: dict[type, list[Binding]] = {}

    def resolve(self, unit_type: type) -> list[Binding]:
        """Return the bindings of a template unit type.

        Repeated calls return the same list instance.

        Raises:
            TemplateError: If the type declares no render body.
        """
        try:
            return self._cache[unit_type]
        except KeyError:
            pass

        if self.cache_dir is not None:
            bindings = self._read_cache(unit_type)
            if bindings is not None:
                self._cache[unit_type] = bindings
                return bindings

        bindings = scan_bindings(unit_type)
        logger.debug("Scanned %d binding(s) for %s", len(bindings), type_key(unit_type))

        if self.cache_dir is not None:
            self._write_cache(unit_type, bindings)

        self._cache[unit_type] = bindings
        return bindings

    def warm_cache(self, unit_types: Iterable[type]) -> None:
        for unit_type in unit_types:
            self.resolve(unit_type)

    def clear_cache(self) -> None:
        """Forget every resolved type and delete this registry's cache files."""
        self._cache.clear()

        if self.cache_dir is not None and self.cache_dir.is_dir():
            for path in self.cache_dir.glob(f"{CACHE_FILE_PREFIX}*.json"):
                path.unlink(missing_ok=True)

    def cache_file(self, unit_type: type) -> Path:
        if self.cache_dir is None:
            raise TemplateError("No cache directory is configured")
        digest = hashlib.md5(type_key(unit_type).encode("utf-8")).hexdigest()
        return self.cache_dir / f"{CACHE_FILE_PREFIX}{digest}.json"

    def _read_cache(self, unit_type: type) -> Optional[list[Binding]]:
        path = self.cache_file(unit_type)
        if not path.is_file():
            return None

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            bindings = [Binding.from_dict(item) for item in payload["bindings"]]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable binding cache %s: %s", path, e)
            return None

        logger.debug("Loaded bindings for %s from %s", type_key(unit_type), path)
        return bindings

    def _write_cache(self, unit_type: type, bindings: list[Binding]) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        payload = {
            "type": type_key(unit_type),
            "bindings": [binding.to_dict() for binding in bindings],
        }

        # Readers must never see a partially written file.
        fd, temp_name = tempfile.mkstemp(
            prefix=".stratum-", suffix=".tmp", dir=self.cache_dir
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(temp_name, self.cache_file(unit_type))
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise


def type_key(unit_type: type) -> str:
    """Stable, process-independent name of a type."""
    return f"{unit_type.__module__}.{unit_type.__qualname__}"


def scan_bindings(unit_type: type) -> list[Binding]:
    """Extract bindings from a template unit type's annotations and render body.

    Slots come first, in the order their annotations are declared (base classes
    before subclasses), followed by the render body's parameters in signature
    order.

    Example:
        >>> class Page:
        ...     app: Annotated[AppService, Inject()]
        ...     def __call__(self, e: Escape) -> str: ...
        >>> scan_bindings(Page)
        [Binding("app", "app", False, "myapp.AppService", GLOBAL, SLOT, False),
         Binding("e", "e", False, "stratum.helpers.Escape", ESCAPE, PARAMETER, False)]
    """
    render_body = _find_render_body(unit_type)
    return _slot_bindings(unit_type) + _parameter_bindings(render_body)


def _find_render_body(unit_type: type):
    for klass in unit_type.__mro__:
        if klass is object:
            break
        if "__call__" in vars(klass):
            return getattr(unit_type, "__call__")
    raise TemplateError(
        f'Template "{unit_type.__qualname__}" does not define a render body (__call__)'
    )


def _slot_bindings(unit_type: type) -> list[Binding]:
    hints = get_type_hints(unit_type, include_extras=True)
    result = []

    for name, annotation in hints.items():
        if get_origin(annotation) is not Annotated:
            continue
        base_type, *metadata = get_args(annotation)
        marker = next((m for m in metadata if isinstance(m, Inject)), None)
        if marker is None:
            continue

        declared, nullable = _unwrap_optional(base_type)
        result.append(
            _make_binding(
                name,
                declared,
                marker,
                BindingTarget.SLOT,
                nullable or hasattr(unit_type, name),
            )
        )

    return result


def _parameter_bindings(render_body) -> list[Binding]:
    sig = inspect.signature(render_body)
    hints = get_type_hints(render_body, include_extras=True)
    result = []

    # The first parameter is the unit instance itself.
    for name, param in list(sig.parameters.items())[1:]:
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue

        annotation = hints.get(name)
        marker = Inject()
        if get_origin(annotation) is Annotated:
            annotation, *metadata = get_args(annotation)
            marker = next((m for m in metadata if isinstance(m, Inject)), marker)

        declared, nullable = _unwrap_optional(annotation)
        result.append(
            _make_binding(
                name,
                declared,
                marker,
                BindingTarget.PARAMETER,
                nullable or param.default is not param.empty,
            )
        )

    return result


def _make_binding(
    name: str,
    declared: Any,
    marker: Inject,
    target: BindingTarget,
    optional: bool,
) -> Binding:
    return Binding(
        name,
        marker.key or name,
        marker.escape,
        _type_name(declared),
        _source_of(declared),
        target,
        optional,
    )


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    if get_origin(annotation) in (Union, types.UnionType):
        args = [a for a in get_args(annotation) if a is not _NONE_TYPE]
        nullable = len(args) < len(get_args(annotation))
        if len(args) == 1:
            return args[0], nullable
        return annotation, nullable
    return annotation, False


def _source_of(declared: Any) -> BindingSource:
    if inspect.isclass(declared):
        if issubclass(declared, Fetch):
            return BindingSource.FETCH
        if issubclass(declared, Escape):
            return BindingSource.ESCAPE
    return BindingSource.GLOBAL


def _type_name(declared: Any) -> Optional[str]:
    if declared is None:
        return None
    if inspect.isclass(declared):
        if declared.__module__ == "builtins":
            return declared.__qualname__
        return type_key(declared)
    return str(declared)
