"""Load and parse the modpack manifest (modlist.json)."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse


class ManifestError(Exception):
    """Raised when the manifest cannot be read or is malformed."""

    pass


@dataclass(frozen=True)
class ManifestEntry:
    """A single desired mod file."""

    filename: str
    name: str
    version: str
    url: str | None = None

    @property
    def project_id(self) -> str | None:
        """Remote project identifier (final path segment of the URL)."""
        if not self.url:
            return None
        return parse_project_id(self.url)


def parse_project_id(url: str) -> str | None:
    """
    Get the project identifier from a mod page URL.

    Supported formats:
        - https://www.curseforge.com/api/v1/mods/{id}
        - https://www.curseforge.com/minecraft/mc-mods/{slug}
        - Either format with a trailing slash or ?query params

    Returns None if the URL has no path segment.
    """
    path = urlparse(url).path.rstrip("/")
    project_id = path.rsplit("/", 1)[-1]
    return project_id or None


def load_manifest(path: Path) -> list[ManifestEntry]:
    """Read a manifest file from disk."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ManifestError(f"Failed to read manifest {path}: {e}")
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in manifest {path}: {e}")

    return parse_manifest(data)


def parse_manifest(data: Any) -> list[ManifestEntry]:
    """
    Parse decoded manifest JSON into entries, keeping list order.

    Each item must be an object with string ``filename``, ``name`` and
    ``version`` keys. ``url`` is optional; other keys (e.g. ``authors``)
    are ignored.
    """
    if not isinstance(data, list):
        raise ManifestError(
            f"Manifest must be a JSON list, got {type(data).__name__}"
        )

    entries = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ManifestError(f"Manifest entry {index} is not an object: {item!r}")

        for key in ("filename", "name", "version"):
            if not isinstance(item.get(key), str):
                raise ManifestError(
                    f"Manifest entry {index} is missing string field '{key}'"
                )

        filename = item["filename"]
        if filename in ("", ".", "..") or "\\" in filename or Path(filename).name != filename:
            raise ManifestError(
                f"Manifest entry {index} filename must be a plain file name: {filename!r}"
            )

        url = item.get("url")
        if url is not None and not isinstance(url, str):
            raise ManifestError(f"Manifest entry {index} has a non-string url: {url!r}")

        entries.append(
            ManifestEntry(
                filename=filename,
                name=item["name"],
                version=item["version"],
                url=url or None,
            )
        )

    return entries
