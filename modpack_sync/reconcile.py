"""Decide what to do with each manifest entry given the local directory."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .filenames import extract_name, extract_version, is_disabled
from .manifest import ManifestEntry
from .state import LocalRelease


class SkipReason(str, Enum):
    DISABLED = "disabled"
    UP_TO_DATE = "up_to_date"


@dataclass(frozen=True)
class Skip:
    entry: ManifestEntry
    reason: SkipReason


@dataclass(frozen=True)
class Replace:
    """Delete the obsolete files, then download the entry's file."""

    entry: ManifestEntry
    obsolete: frozenset[Path] = frozenset()


@dataclass(frozen=True)
class WarnMissingUrl:
    entry: ManifestEntry


ReconciliationAction = Skip | Replace | WarnMissingUrl


def plan_entry(
    entry: ManifestEntry,
    releases: list[LocalRelease],
    wanted: frozenset[str] = frozenset(),
) -> ReconciliationAction:
    """
    Compute the action for a single manifest entry.

    Filenames in wanted (the whole manifest) are never marked obsolete,
    so replacing one entry can't delete a file another entry lists.
    """
    if is_disabled(entry.filename):
        return Skip(entry, SkipReason.DISABLED)

    action = _compare_with_local(entry, releases, wanted)

    if not entry.url:
        return WarnMissingUrl(entry)
    return action


def _compare_with_local(
    entry: ManifestEntry, releases: list[LocalRelease], wanted: frozenset[str]
) -> Skip | Replace:
    name = extract_name(entry.filename)
    version = extract_version(entry.filename)

    # Unparseable filename: fall back to exact filename equality
    if name is None or version is None:
        if any(r.filename == entry.filename for r in releases):
            return Skip(entry, SkipReason.UP_TO_DATE)
        return Replace(entry)

    same_name = [r for r in releases if r.logical_name == name]
    if any(r.version_token == version for r in same_name):
        return Skip(entry, SkipReason.UP_TO_DATE)

    return Replace(
        entry, frozenset(r.path for r in same_name if r.filename not in wanted)
    )


def reconcile(
    entries: list[ManifestEntry], releases: list[LocalRelease]
) -> list[ReconciliationAction]:
    """Compute one action per manifest entry, in manifest order."""
    wanted = frozenset(entry.filename for entry in entries)
    return [plan_entry(entry, releases, wanted) for entry in entries]


def find_orphans(
    entries: list[ManifestEntry], releases: list[LocalRelease]
) -> list[LocalRelease]:
    """Local releases whose filename is not listed in the manifest."""
    wanted = {entry.filename for entry in entries}
    return [r for r in releases if r.filename not in wanted]
