"""CurseForge API client and paginated file catalog."""

import time
from dataclasses import dataclass
from typing import Any, Iterator

import requests

BASE_URL = "https://www.curseforge.com/api/v1"
PAGE_SIZE = 50


class CurseForgeAPIError(Exception):
    """Base exception for CurseForge API errors."""

    pass


class CurseForgeRateLimited(CurseForgeAPIError):
    """Raised when rate limited by the API."""

    def __init__(self, retry_after: int = 60):
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after {retry_after} seconds.")


class FileLookupError(CurseForgeAPIError):
    """Raised when a file can't be found in a project's catalog."""

    pass


@dataclass(frozen=True)
class RemoteFileRecord:
    id: int
    file_name: str


class CurseForgeAPI:
    """Client for the CurseForge file listing and download endpoints."""

    def __init__(
        self,
        api_key: str,
        session: requests.Session | None = None,
        base_url: str = BASE_URL,
        min_request_interval: float = 0.5,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "X-Api-Token": self.api_key,
                "User-Agent": "modpack-sync/0.1.0",
            }
        )
        self._last_request_time = 0.0
        self._min_request_interval = min_request_interval

    def _rate_limit_wait(self) -> None:
        """Ensure we don't exceed rate limits."""
        elapsed = time.time() - self._last_request_time
        if elapsed < self._min_request_interval:
            time.sleep(self._min_request_interval - elapsed)
        self._last_request_time = time.time()

    def _check_status(self, response: requests.Response) -> None:
        """Raise the matching error for a failed response."""
        if response.status_code == 429:
            # Retry-After may also be an HTTP date
            retry_after = response.headers.get("Retry-After", "")
            retry_after = int(retry_after) if retry_after.isdigit() else 60
            raise CurseForgeRateLimited(retry_after)
        if response.status_code == 403:
            raise CurseForgeAPIError(f"Access forbidden: {response.url}")
        if response.status_code == 404:
            raise CurseForgeAPIError(f"Resource not found: {response.url}")
        response.raise_for_status()

    def get_files_page(
        self, project_id: str, page_index: int, page_size: int = PAGE_SIZE
    ) -> tuple[list[RemoteFileRecord], int]:
        """
        Fetch one page of a project's files, newest first.

        Returns (records, total_count).
        """
        self._rate_limit_wait()
        url = f"{self.base_url}/mods/{project_id}/files"
        response = self.session.get(
            url,
            params={
                "pageIndex": page_index,
                "pageSize": page_size,
                "sort": "dateCreated",
                "sortDescending": "true",
                "removeAlphas": "false",
            },
            headers={"Accept": "application/json"},
        )
        self._check_status(response)

        try:
            data: dict[str, Any] = response.json()
            records = [
                RemoteFileRecord(id=int(f["id"]), file_name=f["fileName"])
                for f in data["data"]
            ]
            total = int(data["pagination"]["totalCount"])
        except (ValueError, KeyError, TypeError) as e:
            raise CurseForgeAPIError(f"Unexpected file listing response: {e}")

        return records, total

    def open_download(self, project_id: str, file_id: int) -> requests.Response:
        """Start a streamed download of a file. Caller must close the response."""
        self._rate_limit_wait()
        url = f"{self.base_url}/mods/{project_id}/files/{file_id}/download"
        response = self.session.get(url, stream=True)
        try:
            self._check_status(response)
        except Exception:
            response.close()
            raise
        return response


class CatalogIterator:
    """
    Lazy, single-pass iterator over a project's remote files.

    Pages are fetched on demand, so a consumer that stops at the first
    match leaves the rest of the catalog unfetched. A failed page request
    raises FileLookupError and ends the iteration.
    """

    def __init__(
        self,
        api: CurseForgeAPI,
        project_id: str,
        page_size: int = PAGE_SIZE,
        max_pages: int | None = None,
    ):
        self.api = api
        self.project_id = project_id
        self.page_size = page_size
        self.max_pages = max_pages
        self.page_index = 0
        self.total = 0
        self._buffer: Iterator[RemoteFileRecord] = iter(())
        self._done = False

    def __iter__(self) -> "CatalogIterator":
        return self

    def __next__(self) -> RemoteFileRecord:
        while not self._done:
            record = next(self._buffer, None)
            if record is not None:
                return record

            if self.page_index > 0 and self.page_index * self.page_size >= self.total:
                self._done = True
            elif self.max_pages is not None and self.page_index >= self.max_pages:
                self._done = True
            else:
                self._fetch_page()

        raise StopIteration

    def _fetch_page(self) -> None:
        try:
            records, total = self.api.get_files_page(
                self.project_id, self.page_index, self.page_size
            )
        except (CurseForgeAPIError, requests.RequestException) as e:
            self._done = True
            raise FileLookupError(
                f"Failed to fetch page {self.page_index} of project {self.project_id}: {e}"
            ) from e

        self.page_index += 1
        self.total = total
        if not records:
            self._done = True
        self._buffer = iter(records)


def find_file_id(
    api: CurseForgeAPI,
    project_id: str,
    filename: str,
    max_pages: int | None = None,
) -> int:
    """Find the remote file id for an exact filename, newest files first."""
    for record in CatalogIterator(api, project_id, max_pages=max_pages):
        if record.file_name == filename:
            return record.id

    raise FileLookupError(
        f"Couldn't find file {filename} in project {project_id}. "
        "File may have been removed!"
    )
