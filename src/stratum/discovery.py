"""Locating template files by name.

Names take the form ``"file"`` or ``"folder::file"``; the engine's file
extension is appended. Without a theme, a plain name resolves against the
default directory and a folder name against its folder (optionally falling
back to the default directory). With a theme hierarchy, every theme directory
is searched from the most specific theme down.
"""

from pathlib import Path
from typing import Iterator, Optional, Protocol, Union

from stratum.errors import ConfigurationError, TemplateNotFound

__all__ = [
    "Directory",
    "Folder",
    "Folders",
    "Name",
    "Theme",
    "TemplatePathResolver",
    "NameAndFolderResolver",
    "ThemeResolver",
]

FOLDER_SEPARATOR = "::"

PathLike = Union[str, Path]


class Directory:
    """The default template directory, which may be unset."""

    def __init__(self, path: Optional[PathLike] = None):
        self.path: Optional[Path] = None
        self.set(path)

    def set(self, path: Optional[PathLike]) -> None:
        if path is not None and not Path(path).is_dir():
            raise ConfigurationError(f'The specified path "{path}" does not exist.')
        self.path = Path(path) if path is not None else None

    def get(self) -> Optional[Path]:
        return self.path


class Folder:
    """A named template directory.

    Attributes:
        name: The namespace used in ``"name::file"`` template names.
        path: The directory.
        fallback: Look in the default directory when the file is not found here.
    """

    def __init__(self, name: str, path: PathLike, fallback: bool = False):
        if not Path(path).is_dir():
            raise ConfigurationError(f'The specified directory path "{path}" does not exist.')
        self.name = name
        self.path = Path(path)
        self.fallback = fallback


class Folders:
    def __init__(self):
        self._folders: dict[str, Folder] = {}

    def add(self, name: str, path: PathLike, fallback: bool = False) -> Folder:
        if self.exists(name):
            raise ConfigurationError(f'The template folder "{name}" is already being used.')
        folder = Folder(name, path, fallback)
        self._folders[name] = folder
        return folder

    def remove(self, name: str) -> None:
        if not self.exists(name):
            raise ConfigurationError(f'The template folder "{name}" was not found.')
        del self._folders[name]

    def get(self, name: str) -> Folder:
        if not self.exists(name):
            raise ConfigurationError(f'The template folder "{name}" was not found.')
        return self._folders[name]

    def exists(self, name: str) -> bool:
        return name in self._folders


class Name:
    """A parsed template name.

    Raises:
        ConfigurationError: If the name is empty, uses the folder separator
            more than once, or refers to an unknown folder.
    """

    def __init__(
        self,
        name: str,
        folders: Folders,
        directory: Optional[Path],
        file_extension: str,
    ):
        self.name = name
        self.directory = directory
        self.file_extension = file_extension
        self.folder: Optional[Folder] = None

        parts = name.split(FOLDER_SEPARATOR)
        if len(parts) > 2:
            raise ConfigurationError(
                f'The template name "{name}" is not valid. '
                f'Do not use the folder namespace separator "{FOLDER_SEPARATOR}" more than once.'
            )
        if len(parts) == 2:
            self.folder = folders.get(parts[0])
        if not parts[-1]:
            raise ConfigurationError(
                f'The template name "{name}" is not valid. The template name cannot be empty.'
            )
        self.base_name = parts[-1]
        self.file = self.base_name + (f".{file_extension}" if file_extension else "")

    def candidates(self) -> list[Path]:
        """The paths searched for this name, in search order.

        The default directory is only searched when the folder has fallback
        enabled and does not contain the file.
        """
        if self.folder is None:
            return [self._default_directory() / self.file]

        paths = [self.folder.path / self.file]
        if self.folder.fallback and not paths[0].is_file():
            paths.append(self._default_directory() / self.file)
        return paths

    def _default_directory(self) -> Path:
        if self.directory is None:
            raise ConfigurationError(
                f'The template name "{self.name}" is not valid. '
                "The default directory has not been defined."
            )
        return self.directory


class Theme:
    """A directory of templates that can override those of the themes below it.

    Build hierarchies with :meth:`hierarchy`, base theme first:

        >>> theme = Theme.hierarchy([Theme.new("/base"), Theme.new("/brand", "Brand")])
        >>> [t.name for t in theme.list_hierarchy()]
        ['Brand', 'Default']
    """

    def __init__(self, directory: PathLike, name: str = "Default"):
        self.directory = Path(directory)
        self.name = name
        self._next: Optional["Theme"] = None

    @classmethod
    def new(cls, directory: PathLike, name: str = "Default") -> "Theme":
        return cls(directory, name)

    @staticmethod
    def hierarchy(themes: list["Theme"]) -> "Theme":
        """Chain leaf themes so that later themes take precedence.

        Raises:
            ConfigurationError: If the list is empty, a theme is already part of
                a hierarchy, or two themes share a name.
        """
        if not themes:
            raise ConfigurationError("Empty theme hierarchies are not allowed.")
        for theme in themes:
            if theme._next is not None:
                raise ConfigurationError(
                    "Nested theme hierarchies are not allowed, make sure to use Theme.new when "
                    f"creating themes in your hierarchy. Theme {theme.name} is already in a hierarchy."
                )

        top = themes[0]
        for child in themes[1:]:
            child._next = top
            top = child

        names = [theme.name for theme in top.list_hierarchy()]
        if len(set(names)) != len(names):
            raise ConfigurationError(
                "Duplicate theme names in hierarchies are not allowed. "
                f"Received theme names: [{', '.join(names)}]."
            )
        return top

    def list_hierarchy(self) -> Iterator["Theme"]:
        theme: Optional[Theme] = self
        while theme is not None:
            yield theme
            theme = theme._next


class TemplatePathResolver(Protocol):
    def __call__(self, name: Name) -> Path:
        ...


class NameAndFolderResolver:
    """Resolves names against their folder, then the default directory."""

    def __call__(self, name: Name) -> Path:
        candidates = name.candidates()
        for path in candidates:
            if path.is_file():
                return path
        raise TemplateNotFound(
            name.name,
            [str(path) for path in candidates],
            'The template "%s" could not be found at: %s.'
            % (name.name, ", ".join(f'"{path}"' for path in candidates)),
        )


class ThemeResolver:
    """Resolves names against each theme of a hierarchy in turn."""

    def __init__(self, theme: Theme):
        self.theme = theme

    def __call__(self, name: Name) -> Path:
        searched: list[tuple[str, Path]] = []
        for theme in self.theme.list_hierarchy():
            path = theme.directory / name.file
            if path.is_file():
                return path
            searched.append((theme.name, path))

        raise TemplateNotFound(
            name.name,
            [str(path) for _, path in searched],
            'The template "%s" was not found in the following themes: %s'
            % (name.name, ", ".join(f"{theme}:{path}" for theme, path in searched)),
        )
