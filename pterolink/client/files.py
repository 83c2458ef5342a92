"""Files of one server, cached per directory."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from ..caseconv import parse_date
from ..config import OptionSpec
from ..dictionary import Dict
from ..envelopes import CollectionEnvelope, parse_envelope
from ..managers import BaseManager, Resource
from ..transport.http import RequestManager
from . import endpoints


def _clean(path: str) -> str:
    # the daemon resolves paths from the server root; "./x" means "/x"
    return path[1:] if path.startswith(".") else path


class FileManager(BaseManager[str]):
    """Directory listings keyed by directory, then by file name.

    ``modeBits`` is an int; ``createdAt``/``modifiedAt`` are datetimes.
    """

    KEY = "name"
    CASTS = {"mode_bits": int, "created_at": parse_date, "modified_at": parse_date}

    def __init__(
        self,
        requests: RequestManager,
        server_id: str,
        options: OptionSpec | None = None,
    ) -> None:
        super().__init__(requests, options)
        self.server_id = server_id
        self.cache: Dict[str, Dict[str, Resource]] = Dict()

    def _patch_dir(self, directory: str, raw: Any) -> Dict[str, Resource]:
        envelope = parse_envelope(raw)
        items = envelope.items if isinstance(envelope, CollectionEnvelope) else [envelope.attributes]

        res: Dict[str, Resource] = Dict()
        for attributes in items:
            item = self._normalize(attributes)
            res[item["name"]] = item
        if self.options.cache:
            self.cache[directory] = self.cache.get(directory, Dict()).join(res)
        return res

    async def fetch(self, directory: str = "/") -> Dict[str, Resource]:  # type: ignore[override]
        """List a directory; listings are always fetched fresh."""
        data = await self.requests.get(
            endpoints.files(self.server_id), params={"directory": _clean(directory)}
        )
        return self._patch_dir(directory, data)

    async def fetch_all(self, directory: str = "/") -> Dict[str, Resource]:  # type: ignore[override]
        return await self.fetch(directory)

    async def get_contents(self, path: str) -> str:
        return await self.requests.get_text(
            endpoints.file_contents(self.server_id), params={"file": _clean(path)}
        )

    async def get_download_url(self, path: str) -> str:
        data = await self.requests.get(
            endpoints.file_download(self.server_id), params={"file": _clean(path)}
        )
        return data["attributes"]["url"]

    async def download(self, path: str, dest: Path) -> None:
        """Download a file to ``dest``.

        Raises:
            FileExistsError: If something already exists at ``dest``.
        """
        dest = Path(dest)
        if dest.exists():
            raise FileExistsError(f"A file or directory exists at {dest}")

        url = await self.get_download_url(path)
        data = await self.requests.raw("GET", url)
        await asyncio.to_thread(dest.write_bytes, data or b"")

    async def get_upload_url(self, directory: str = "/") -> str:
        """Signed URL accepting a multipart upload into ``directory``."""
        data = await self.requests.get(
            endpoints.file_upload(self.server_id), params={"directory": _clean(directory)}
        )
        return data["attributes"]["url"]

    async def write(self, path: str, content: str) -> None:
        await self.requests.post(
            endpoints.file_write(self.server_id), content, params={"file": _clean(path)}
        )

    async def create_folder(self, directory: str, name: str) -> None:
        await self.requests.post(
            endpoints.file_create_folder(self.server_id),
            {"root": _clean(directory), "name": name},
        )

    async def rename(self, path: str, name: str) -> None:
        """Rename the file at ``path`` to ``name`` in the same directory."""
        root, _, current = _clean(path).rpartition("/")
        await self.requests.put(
            endpoints.file_rename(self.server_id),
            {"root": root or "/", "files": [{"from": current, "to": name}]},
        )

    async def chmod(self, directory: str, modes: Mapping[str, str | int]) -> None:
        """Set modes, e.g. ``{"start.sh": "755"}``."""
        files = [{"file": _clean(name), "mode": str(mode)} for name, mode in modes.items()]
        await self.requests.post(
            endpoints.file_chmod(self.server_id), {"root": _clean(directory), "files": files}
        )

    async def copy(self, path: str) -> None:
        await self.requests.post(endpoints.file_copy(self.server_id), {"location": _clean(path)})

    async def compress(self, directory: str, files: Sequence[str]) -> Dict[str, Resource]:
        """Archive ``files``; returns the archive, which is cached under ``directory``."""
        data = await self.requests.post(
            endpoints.file_compress(self.server_id),
            {"root": _clean(directory), "files": [_clean(f) for f in files]},
        )
        return self._patch_dir(directory, data)

    async def decompress(self, directory: str, file: str) -> None:
        await self.requests.post(
            endpoints.file_decompress(self.server_id),
            {"root": _clean(directory), "file": _clean(file)},
        )

    async def delete(self, directory: str, files: Sequence[str]) -> None:
        await self.requests.post(
            endpoints.file_delete(self.server_id),
            {"root": _clean(directory), "files": [_clean(f) for f in files]},
        )
        cached = self.cache.get(directory)
        if cached is not None:
            for name in files:
                cached.delete(_clean(name).rsplit("/", 1)[-1])
