"""Named content blocks that a template hands up to its layout.

A template opens a section, writes into it and stops it; the captured text is
committed under the section's name according to its mode. When the template
has declared a layout, all committed sections travel to the layout's render,
together with the template's own output under the reserved name ``content``.
"""

from enum import Enum
from typing import Optional

from stratum.errors import SectionError

__all__ = ["SectionMode", "SectionStack", "CONTENT_SECTION"]

CONTENT_SECTION = "content"


class SectionMode(Enum):
    REWRITE = "rewrite"
    APPEND = "append"
    PREPEND = "prepend"


class SectionStack:
    """Committed sections plus the one section currently open, if any.

    This class only tracks state. Capturing the text written while a section
    is open is the job of the owning :class:`~stratum.context.RenderContext`.
    """

    def __init__(self):
        self.sections: dict[str, str] = {}
        self.modes: dict[str, SectionMode] = {}
        self._open: Optional[tuple[str, SectionMode]] = None

    @property
    def open_section(self) -> Optional[str]:
        return self._open[0] if self._open else None

    def open(self, name: str, mode: Optional[SectionMode] = None) -> bool:
        """Open a section for writing.

        Args:
            name: The section name. ``content`` is reserved.
            mode: Set and remember the mode for this name. When omitted, the
                remembered mode is used, or REWRITE if there is none.

        Returns:
            True if the text written to this section will be discarded because
            a rewrite of it has already been committed.

        Raises:
            SectionError: If the name is reserved or a section is already open.
        """
        if name == CONTENT_SECTION:
            raise SectionError(f'The section name "{CONTENT_SECTION}" is reserved.')
        if self._open is not None:
            raise SectionError(
                f'You cannot nest sections within other sections ("{name}" inside "{self._open[0]}").'
            )

        if mode is not None:
            self.modes[name] = mode
        mode = self.modes.get(name, SectionMode.REWRITE)
        self._open = (name, mode)
        return self._discards(name, mode)

    def commit(self, text: str) -> str:
        """Close the open section, storing ``text`` according to its mode.

        A REWRITE of a section that already has content keeps the existing
        content and drops ``text``: the first rewrite wins.

        Returns:
            The name of the section that was closed.

        Raises:
            SectionError: If no section is open.
        """
        if self._open is None:
            raise SectionError("You must start a section before you can stop it.")
        name, mode = self._open
        self._open = None

        if self._discards(name, mode):
            return name

        existing = self.sections.get(name, "")
        if mode is SectionMode.APPEND:
            self.sections[name] = existing + text
        elif mode is SectionMode.PREPEND:
            self.sections[name] = text + existing
        else:
            self.sections[name] = text
        return name

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.sections.get(name, default)

    def inherit(self, child: "SectionStack", content: str) -> None:
        """Take over a rendered child's sections, with its output as ``content``."""
        self.sections.update(child.sections)
        self.sections[CONTENT_SECTION] = content
        self.modes.update(child.modes)

    def _discards(self, name: str, mode: SectionMode) -> bool:
        return mode is SectionMode.REWRITE and name in self.sections
