# Downloads the vanilla-mcdoc symbols and the game data the generator needs
import base64
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from .config import CACHE_DIR, HEADERS, LANG_URL, SPYGLASS_API, SYMBOLS_URL, VERSIONS_URL
from .errors import DownloadError, TypegenError

logger = logging.getLogger(__name__)


class HttpCache:
    """Response bodies on disk next to the ETag they were served with"""

    def __init__(self, root: Optional[Path] = CACHE_DIR):
        self.root = Path(root) / "http" if root is not None else None

    def _file_name(self, url: str) -> str:
        return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii").rstrip("=")

    def match(self, url: str) -> Optional[tuple]:
        """(etag, body) for `url`, or None when nothing is cached"""
        if self.root is None:
            return None
        name = self._file_name(url)
        etag_path = self.root / f"{name}.etag"
        body_path = self.root / f"{name}.bin"
        if not etag_path.exists() or not body_path.exists():
            return None
        return etag_path.read_text(encoding="utf-8").strip(), body_path.read_bytes()

    def put(self, url: str, etag: Optional[str], body: bytes):
        if self.root is None or not etag:
            return
        name = self._file_name(url)
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / f"{name}.bin").write_bytes(body)
        (self.root / f"{name}.etag").write_text(f"{etag}\n", encoding="utf-8")


class Downloader:
    def __init__(self, session: Optional[requests.Session] = None, cache: Optional[HttpCache] = None):
        self.session = session or requests.Session()
        self.cache = cache if cache is not None else HttpCache()

    def fetch(self, url: str) -> bytes:
        """GET `url`, revalidating a cached copy with If-None-Match"""
        headers = dict(HEADERS)
        cached = self.cache.match(url)
        if cached is not None:
            headers["If-None-Match"] = cached[0]

        try:
            response = self.session.get(url, headers=headers)
        except requests.RequestException:
            if cached is None:
                raise
            logger.warning("Request to %s failed, falling back to cache", url)
            return cached[1]

        if response.status_code == 304 and cached is not None:
            logger.info("Reusing cache for %s", url)
            return cached[1]
        if not 200 <= response.status_code < 300:
            raise DownloadError(url, response.status_code)

        self.cache.put(url, response.headers.get("ETag"), response.content)
        logger.info("Updated cache for %s", url)
        return response.content

    def fetch_json(self, url: str) -> Any:
        return json.loads(self.fetch(url))

    def symbols(self) -> Dict[str, Any]:
        return self.fetch_json(SYMBOLS_URL)

    def latest_release(self) -> str:
        """Id of the newest release, snapshots are skipped"""
        versions: List[Dict[str, Any]] = self.fetch_json(VERSIONS_URL)
        for version in versions:
            if version.get("type", "release") == "release":
                return version["id"]
        raise TypegenError(f"No release listed at {VERSIONS_URL}")

    def registries(self, version: str) -> Dict[str, List[str]]:
        return self.fetch_json(f"{SPYGLASS_API}/mcje/versions/{version}/registries")

    def block_states(self, version: str) -> Dict[str, Any]:
        return self.fetch_json(f"{SPYGLASS_API}/mcje/versions/{version}/block_states")

    def translation_keys(self) -> List[str]:
        return sorted(self.fetch_json(LANG_URL))


def main():
    print("Downloading symbols...")
    downloader = Downloader()
    symbols = downloader.symbols()
    print(f"Downloaded: {len(symbols.get('mcdoc', {}))} symbols")
    version = downloader.latest_release()
    registries = downloader.registries(version)
    print(f"Downloaded: {len(registries)} registries for {version}")


if __name__ == "__main__":
    main()
