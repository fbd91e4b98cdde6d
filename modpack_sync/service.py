"""Service layer - applies reconciliation actions to the mods directory."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .api import CurseForgeAPI, FileLookupError, find_file_id
from .downloader import DownloadError, Downloader
from .manifest import ManifestEntry
from .reconcile import (
    ReconciliationAction,
    Replace,
    Skip,
    SkipReason,
    WarnMissingUrl,
    find_orphans,
    reconcile,
)
from .state import LocalRelease, ensure_directory, scan_directory

# log callback: (level, message), level is "info", "warn" or "error"
LogCallback = Callable[[str, str], None]


@dataclass
class SyncResult:
    downloaded: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class SyncPlan:
    actions: list[ReconciliationAction]
    orphans: list[LocalRelease]


def _noop_log(level: str, message: str) -> None:
    pass


class SyncService:
    """Brings a mods directory in line with a manifest."""

    def __init__(
        self,
        api: CurseForgeAPI | None,
        mods_dir: Path,
        on_log: LogCallback | None = None,
        downloader: Downloader | None = None,
    ):
        self.api = api
        self.mods_dir = Path(mods_dir)
        self.log = on_log or _noop_log
        self._downloader = downloader

    @property
    def downloader(self) -> Downloader:
        if self._downloader is None:
            self._downloader = Downloader(self.api)
        return self._downloader

    def plan(self, entries: list[ManifestEntry]) -> SyncPlan:
        """Compute actions and orphans without touching any mod file."""
        releases = scan_directory(self.mods_dir)
        return SyncPlan(
            actions=reconcile(entries, releases),
            orphans=find_orphans(entries, releases),
        )

    def run(self, entries: list[ManifestEntry]) -> SyncResult:
        """
        Sync the mods directory with the manifest.

        Entries are handled in manifest order. A lookup or download failure
        is logged and recorded in the result, and the run carries on with
        the next entry. Orphans are removed once every entry is done.

        Raises DirectoryError if the mods directory can't be created or
        listed.
        """
        result = SyncResult()
        ensure_directory(self.mods_dir)

        for action in reconcile(entries, scan_directory(self.mods_dir)):
            self._apply(action, result)

        self._clean_orphans(entries, result)
        return result

    def _apply(self, action: ReconciliationAction, result: SyncResult) -> None:
        entry = action.entry

        if isinstance(action, Skip):
            if action.reason == SkipReason.DISABLED:
                self.log("info", f"Skipping disabled mod: {entry.filename}")
            else:
                self.log("info", f"Skipping already up to date mod: {entry.filename}")
            result.skipped.append(entry.filename)

        elif isinstance(action, WarnMissingUrl):
            self.log(
                "warn",
                f"Skipping file: {entry.filename} missing url! Check your modlist.json file!",
            )
            result.warnings.append(entry.filename)

        elif isinstance(action, Replace):
            self._replace(action, result)

    def _replace(self, action: Replace, result: SyncResult) -> None:
        entry = action.entry

        for path in sorted(action.obsolete):
            self.log("info", f"Attempting to remove existing file: {path}")
            if self._remove(path, result):
                result.deleted.append(path.name)

        project_id = entry.project_id
        if project_id is None:
            self._fail(result, f"Couldn't get a project id from url {entry.url} for {entry.filename}")
            return

        self.log("info", f"Attempting to find file {entry.filename}")
        try:
            file_id = find_file_id(self.api, project_id, entry.filename)
        except FileLookupError as e:
            self._fail(result, str(e))
            return

        self.log("info", f"Matching file found (id {file_id}), downloading {entry.filename}")
        try:
            self.downloader.download_file(project_id, file_id, entry.filename, self.mods_dir)
        except DownloadError as e:
            self._fail(result, str(e))
            return

        self.log("info", f"Successfully downloaded {entry.filename}")
        result.downloaded.append(entry.filename)

    def _clean_orphans(self, entries: list[ManifestEntry], result: SyncResult) -> None:
        for orphan in find_orphans(entries, scan_directory(self.mods_dir)):
            self.log("info", f"Deleting removed mod: {orphan.filename}")
            if self._remove(orphan.path, result):
                result.deleted.append(orphan.filename)

    def _remove(self, path: Path, result: SyncResult) -> bool:
        """Delete a file. A file that is already gone is not an error."""
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            self._fail(result, f"Failed to remove {path}: {e}")
            return False
        return True

    def _fail(self, result: SyncResult, message: str) -> None:
        self.log("error", message)
        result.errors.append(message)
