"""Engine configuration, with environment variable defaults for deployments."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

__all__ = ["EngineConfig"]

DEFAULT_FILE_EXTENSION = "html"


@dataclass(frozen=True)
class EngineConfig:
    """Settings an :class:`~stratum.engine.Engine` is created with.

    Attributes:
        directory: Default directory for template discovery.
        cache_dir: Directory for the persistent binding cache. ``None`` keeps
            bindings in memory only, which is what you want in development.
        file_extension: Extension appended to template names during discovery.
            An empty string appends nothing.
    """

    directory: Optional[Path] = None
    cache_dir: Optional[Path] = None
    file_extension: str = DEFAULT_FILE_EXTENSION

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Read ``STRATUM_TEMPLATE_DIR``, ``STRATUM_CACHE_DIR`` and ``STRATUM_FILE_EXTENSION``."""
        directory = os.environ.get("STRATUM_TEMPLATE_DIR")
        cache_dir = os.environ.get("STRATUM_CACHE_DIR")
        return cls(
            directory=Path(directory).expanduser() if directory else None,
            cache_dir=Path(cache_dir).expanduser() if cache_dir else None,
            file_extension=os.environ.get("STRATUM_FILE_EXTENSION", DEFAULT_FILE_EXTENSION),
        )
