import json
import re
from pathlib import Path

import pytest
import requests

from modpack_sync.api import BASE_URL, CurseForgeAPI
from modpack_sync.manifest import ManifestEntry

FILES_RE = re.compile(r"/mods/([^/]+)/files$")
DOWNLOAD_RE = re.compile(r"/mods/([^/]+)/files/(\d+)/download$")


class FakeResponse:
    def __init__(self, url, status_code=200, json_data=None, content=b"", headers=None):
        self.url = url
        self.status_code = status_code
        self._json = json_data
        self.content = content
        self.headers = headers or {}
        self.closed = False

    @property
    def text(self):
        return json.dumps(self._json) if self._json is not None else ""

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}")

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i : i + chunk_size]

    def close(self):
        self.closed = True


class FakeSession:
    """
    Stands in for requests.Session.

    catalogs maps project id -> full list of (id, fileName) tuples, served
    in pages. downloads maps file id -> bytes. Any project listed in
    failing_projects returns a 500 for listing requests.
    """

    def __init__(self, catalogs=None, downloads=None, failing_projects=(), failing_downloads=()):
        self.headers = {}
        self.catalogs = catalogs or {}
        self.downloads = downloads or {}
        self.failing_projects = set(failing_projects)
        self.failing_downloads = set(failing_downloads)
        self.calls = []

    def get(self, url, params=None, headers=None, stream=False):
        self.calls.append({"url": url, "params": params, "headers": headers, "stream": stream})

        match = DOWNLOAD_RE.search(url)
        if match:
            file_id = int(match.group(2))
            if file_id in self.failing_downloads or file_id not in self.downloads:
                return FakeResponse(url, status_code=500)
            content = self.downloads[file_id]
            return FakeResponse(
                url, content=content, headers={"content-length": str(len(content))}
            )

        match = FILES_RE.search(url)
        if match:
            project_id = match.group(1)
            if project_id in self.failing_projects:
                return FakeResponse(url, status_code=500)
            if project_id not in self.catalogs:
                return FakeResponse(url, status_code=404)
            files = self.catalogs[project_id]
            page_index = int(params["pageIndex"])
            page_size = int(params["pageSize"])
            page = files[page_index * page_size : (page_index + 1) * page_size]
            return FakeResponse(
                url,
                json_data={
                    "data": [{"id": fid, "fileName": name} for fid, name in page],
                    "pagination": {"totalCount": len(files)},
                },
            )

        return FakeResponse(url, status_code=404)

    def listing_calls(self, project_id=None):
        return [
            c for c in self.calls
            if FILES_RE.search(c["url"])
            and (project_id is None or FILES_RE.search(c["url"]).group(1) == project_id)
        ]

    def download_calls(self):
        return [c for c in self.calls if DOWNLOAD_RE.search(c["url"])]


def make_api(session: FakeSession) -> CurseForgeAPI:
    return CurseForgeAPI("test-key", session=session, base_url=BASE_URL, min_request_interval=0)


def entry(filename, url="https://www.curseforge.com/api/v1/mods/12345", name=None, version="1.0"):
    return ManifestEntry(filename=filename, name=name or filename, version=version, url=url)


def touch(directory: Path, *names: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_bytes(b"old")


@pytest.fixture
def mods_dir(tmp_path):
    return tmp_path / "mods"
