"""Local state of the mods directory, derived from its file listing."""

from dataclasses import dataclass
from pathlib import Path

from .filenames import extract_name, extract_version, is_release_artifact


class DirectoryError(Exception):
    """Raised when the mods directory cannot be created or listed."""

    pass


@dataclass(frozen=True)
class LocalRelease:
    """A release artifact currently present in the mods directory."""

    path: Path
    filename: str
    logical_name: str | None
    version_token: str | None

    @classmethod
    def from_path(cls, path: Path) -> "LocalRelease":
        return cls(
            path=path,
            filename=path.name,
            logical_name=extract_name(path.name),
            version_token=extract_version(path.name),
        )


def ensure_directory(directory: Path) -> Path:
    """Create the mods directory if it does not exist."""
    directory = Path(directory)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryError(f"Cannot create mods directory {directory}: {e}")
    return directory


def scan_directory(directory: Path) -> list[LocalRelease]:
    """
    List the release artifacts directly inside a directory.

    Only regular ``.jar`` files are returned, sorted by name. Files whose
    name can't be parsed are still listed with None name/version so that
    orphan detection sees them. The directory is created if missing.
    """
    directory = ensure_directory(directory)

    try:
        paths = sorted(directory.iterdir())
    except OSError as e:
        raise DirectoryError(f"Cannot list mods directory {directory}: {e}")

    return [
        LocalRelease.from_path(path)
        for path in paths
        if is_release_artifact(path.name) and path.is_file()
    ]
