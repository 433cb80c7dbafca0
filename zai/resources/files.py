"""
Files API.
"""

from pathlib import Path
from typing import IO, Any, Dict, Mapping, Optional, Union

from ..core.transport import OptionsLike
from .base import BaseResource

FileInput = Union[bytes, IO[bytes], str, Path]


class Files(BaseResource):
    """Upload, list, delete and download files."""

    async def create(
        self,
        file: FileInput,
        purpose: str,
        filename: Optional[str] = None,
        *,
        extra_headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[int] = None,
        options: OptionsLike = None,
    ) -> Dict[str, Any]:
        """Upload ``file`` as multipart form data.

        ``file`` may be raw bytes, a binary file object, or a path.
        """
        if isinstance(file, (str, Path)):
            path = Path(file)
            content: Union[bytes, IO[bytes]] = path.read_bytes()
            filename = filename or path.name
        else:
            content = file
            filename = filename or getattr(file, "name", None) or "file"
        filename = Path(str(filename)).name

        return await self._transport.post_form(
            "/files",
            form_data={"purpose": purpose},
            files={"file": (filename, content)},
            options=self._merge_options(options, extra_headers, timeout),
        )

    async def list(
        self,
        purpose: Optional[str] = None,
        order: Optional[str] = None,
        limit: Optional[int] = None,
        after: Optional[str] = None,
        *,
        extra_headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[int] = None,
        options: OptionsLike = None,
    ) -> Dict[str, Any]:
        """List uploaded files."""
        params = self._compact({"purpose": purpose, "order": order, "limit": limit or None, "after": after})
        return await self._transport.get(
            "/files", self._merge_options(options, extra_headers, timeout), params=params or None
        )

    async def delete(self, file_id: str, options: OptionsLike = None) -> Dict[str, Any]:
        return await self._transport.delete(f"/files/{file_id}", options)

    async def content(self, file_id: str, options: OptionsLike = None) -> Any:
        """Return the contents of a file."""
        return await self._transport.get(f"/files/{file_id}/content", options)
