"""HTTP transport: aiohttp for the non-blocking path, requests for the blocking one."""
import asyncio
import logging
from typing import Dict, Optional
from urllib.parse import urljoin

import aiohttp
import requests

from ..error.exceptions import ErrorContext, TransportError

logger = logging.getLogger(__name__)


class HttpTransport:
    """Fetches template source over HTTP(S)."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        verify_ssl: bool = True,
        encoding: str = "utf-8",
    ):
        """
        Initialize the transport.

        Args:
            base_url: Base for resolving relative template URLs
            timeout: Total request timeout in seconds, None for no timeout
            headers: Extra headers sent with every request
            verify_ssl: Verify TLS certificates
            encoding: Body encoding used when the response names no charset
        """
        self.base_url = base_url
        self.timeout = timeout
        self.headers = dict(headers or {})
        self.verify_ssl = verify_ssl
        self.encoding = encoding

    def resolve(self, url: str) -> str:
        """Resolve a possibly relative URL against the base URL."""
        if self.base_url:
            return urljoin(self.base_url, url)
        return url

    async def get_async(self, url: str) -> str:
        target = self.resolve(url)
        context = ErrorContext(component="HttpTransport", operation="get_async")
        logger.debug(f"GET {target}")
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(headers=self.headers, timeout=timeout) as session:
                async with session.get(target, ssl=self.verify_ssl) as response:
                    if response.status >= 400:
                        raise TransportError(
                            f"GET {target} failed: HTTP {response.status}",
                            url=target,
                            status=response.status,
                            context=context,
                        )
                    return await response.text(encoding=None if response.charset else self.encoding)
        except asyncio.TimeoutError as e:
            raise TransportError(f"GET {target} timed out", url=target, context=context) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"GET {target} failed: {e}", url=target, context=context) from e

    def get_sync(self, url: str) -> str:
        target = self.resolve(url)
        context = ErrorContext(component="HttpTransport", operation="get_sync")
        logger.debug(f"GET {target} (blocking)")
        try:
            response = requests.get(
                target,
                headers=self.headers,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.RequestException as e:
            raise TransportError(f"GET {target} failed: {e}", url=target, context=context) from e

        if not response.ok:
            raise TransportError(
                f"GET {target} failed: HTTP {response.status_code}",
                url=target,
                status=response.status_code,
                context=context,
            )
        if not _has_charset(response.headers.get("Content-Type", "")):
            return response.content.decode(self.encoding)
        return response.text


def _has_charset(content_type: str) -> bool:
    return "charset=" in content_type.lower()
