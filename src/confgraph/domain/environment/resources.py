"""Resource handles and the loader that turns location strings into them."""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources as importlib_resources
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Final, Protocol

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable

FILE_PREFIX: Final[str] = "file:"
PACKAGE_PREFIX: Final[str] = "package:"


class Resource(Protocol):
    @property
    def description(self) -> str: ...

    @property
    def filename(self) -> str: ...

    def exists(self) -> bool: ...

    def open(self) -> BinaryIO:
        """Open for binary reading; raises ``FileNotFoundError`` when absent."""
        ...


@dataclass(frozen=True, slots=True)
class FileResource:
    path: Path

    @property
    def description(self) -> str:
        return f"file [{self.path}]"

    @property
    def filename(self) -> str:
        return self.path.name

    def exists(self) -> bool:
        return self.path.is_file()

    def open(self) -> BinaryIO:
        return self.path.open("rb")


@dataclass(frozen=True, slots=True)
class PackageResource:
    """A data file shipped inside an importable package."""

    package: str
    resource_path: str

    @property
    def description(self) -> str:
        return f"package resource [{self.package}/{self.resource_path}]"

    @property
    def filename(self) -> str:
        return self.resource_path.rsplit("/", 1)[-1]

    def exists(self) -> bool:
        try:
            return self._traversable().is_file()
        except FileNotFoundError:
            return False

    def open(self) -> BinaryIO:
        target = self._traversable()
        if not target.is_file():
            raise FileNotFoundError(f"{self.description} cannot be opened because it does not exist")
        return target.open("rb")  # type: ignore[return-value]

    def _traversable(self) -> Traversable:
        try:
            root = importlib_resources.files(self.package)
        except ModuleNotFoundError as exc:
            raise FileNotFoundError(f"Package {self.package!r} not found") from exc
        return root.joinpath(*self.resource_path.split("/"))


class ResourceLoader(Protocol):
    def get_resource(self, location: str) -> Resource: ...


class DefaultResourceLoader:
    """Resolve ``package:pkg/path``, ``file:path`` and plain filesystem paths.

    Relative filesystem paths are anchored at ``base_dir`` (the working directory
    by default).
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        self.base_dir = base_dir

    def get_resource(self, location: str) -> Resource:
        if location.startswith(PACKAGE_PREFIX):
            package, _, resource_path = location[len(PACKAGE_PREFIX) :].lstrip("/").partition("/")
            if not resource_path:
                raise ValueError(f"Package resource location needs a path: {location!r}")
            return PackageResource(package=package, resource_path=resource_path)
        if location.startswith(FILE_PREFIX):
            location = location[len(FILE_PREFIX) :]
        path = Path(location).expanduser()
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        return FileResource(path=path)


@dataclass(frozen=True, slots=True)
class EncodedResource:
    resource: Resource
    encoding: str | None = None

    def read_text(self, default_encoding: str) -> str:
        with self.resource.open() as handle:
            return handle.read().decode(self.encoding or default_encoding)
