"""Download mod files with progress tracking."""

from pathlib import Path
from typing import Callable

import requests
from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from .api import CurseForgeAPI, CurseForgeAPIError


class DownloadError(Exception):
    """Raised when a download fails."""

    pass


class Downloader:
    """Streams mod files from the download endpoint into a directory."""

    def __init__(self, api: CurseForgeAPI, progress: Progress | None = None):
        self.api = api
        self.progress = progress

    def download_file(
        self,
        project_id: str,
        file_id: int,
        filename: str,
        target_dir: Path,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> Path:
        """
        Download a file to target_dir/filename, overwriting it if present.

        Bytes go to a temporary file first which is renamed into place
        once the transfer completes.

        Args:
            on_progress: Optional callback(bytes_downloaded, total_bytes).

        Returns path to the downloaded file.
        """
        target_dir = Path(target_dir)
        temp_path = target_dir / f".downloading_{filename}"
        final_path = target_dir / filename

        task_id: TaskID | None = None
        if self.progress is not None:
            task_id = self.progress.add_task("download", filename=filename[:40], total=None)

        try:
            response = self.api.open_download(project_id, file_id)
            try:
                total_size = response.headers.get("content-length", "")
                total_size = int(total_size) if total_size.isdigit() else 0
                if self.progress is not None and task_id is not None:
                    self.progress.update(task_id, total=total_size or None)

                bytes_downloaded = 0
                with open(temp_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=8192):
                        if chunk:
                            f.write(chunk)
                            bytes_downloaded += len(chunk)
                            if self.progress is not None and task_id is not None:
                                self.progress.update(task_id, advance=len(chunk))
                            if on_progress:
                                on_progress(bytes_downloaded, total_size)
            finally:
                response.close()

            temp_path.replace(final_path)
            return final_path

        except (CurseForgeAPIError, requests.RequestException, OSError) as e:
            # Clean up temp file on error
            if temp_path.exists():
                temp_path.unlink()
            raise DownloadError(f"Failed to download {filename}: {e}")

        finally:
            if self.progress is not None and task_id is not None:
                self.progress.remove_task(task_id)


def create_download_progress(console: Console | None = None) -> Progress:
    """Create a progress bar for downloads."""
    return Progress(
        TextColumn("[bold blue]{task.fields[filename]}", justify="right"),
        BarColumn(bar_width=30),
        "[progress.percentage]{task.percentage:>3.0f}%",
        DownloadColumn(),
        TransferSpeedColumn(),
        TimeRemainingColumn(),
        console=console,
    )
