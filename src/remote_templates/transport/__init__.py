"""
Transports that fetch raw template source.
"""
from .base import Transport
from .http import HttpTransport
from .local import LocalTransport


def create_transport(config) -> Transport:
    """Pick the transport a TemplateCacheConfiguration asks for."""
    if config.template_root is not None:
        return LocalTransport(config.template_root, encoding=config.encoding)
    return HttpTransport(
        base_url=config.base_url,
        timeout=config.request_timeout,
        headers=config.headers,
        verify_ssl=config.verify_ssl,
        encoding=config.encoding,
    )


__all__ = [
    'Transport',
    'HttpTransport',
    'LocalTransport',
    'create_transport',
]
