"""Filesystem transport for templates kept on disk."""
import logging
from pathlib import Path
from typing import Union
from urllib.parse import urlparse
from urllib.request import url2pathname

import aiofiles

from ..error.exceptions import ErrorContext, TransportError

logger = logging.getLogger(__name__)


class LocalTransport:
    """
    Reads template source from a directory.

    Relative URLs are resolved against ``root``; ``file://`` URLs are read
    as absolute paths.
    """

    def __init__(self, root: Union[str, Path] = ".", encoding: str = "utf-8"):
        self.root = Path(root)
        self.encoding = encoding

    def resolve(self, url: str) -> Path:
        parsed = urlparse(url)
        if parsed.scheme == "file":
            return Path(url2pathname(parsed.path))
        return self.root / url

    async def get_async(self, url: str) -> str:
        path = self.resolve(url)
        context = ErrorContext(component="LocalTransport", operation="get_async")
        logger.debug(f"Reading {path}")
        try:
            async with aiofiles.open(path, "r", encoding=self.encoding) as f:
                return await f.read()
        except OSError as e:
            raise TransportError(f"Cannot read {path}: {e}", url=url, context=context) from e

    def get_sync(self, url: str) -> str:
        path = self.resolve(url)
        context = ErrorContext(component="LocalTransport", operation="get_sync")
        logger.debug(f"Reading {path} (blocking)")
        try:
            return path.read_text(encoding=self.encoding)
        except OSError as e:
            raise TransportError(f"Cannot read {path}: {e}", url=url, context=context) from e
