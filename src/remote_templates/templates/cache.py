"""
Template cache: fetches named templates, compiles them once and renders them on demand.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Set

from ..config.configuration import TemplateCacheConfiguration, ensure_config
from ..error.exceptions import ErrorContext, TemplateNotRegistered
from ..transport import Transport, create_transport
from ..utils.logging import get_logger
from .compiler import CompiledTemplate, TemplateCompiler
from .target import append_html

logger = logging.getLogger(__name__)

AllLoadedCallback = Callable[[], Any]
ErrorCallback = Callable[[str, BaseException], Any]


class TemplateCache:
    """
    Cache of compiled templates keyed by logical name.

    ``registry`` maps template names to URLs and may be extended by callers
    at any time. ``compiled`` maps names to render functions; entries are
    added or replaced by ``store`` and never removed.

    Non-blocking operations run as tasks on the running asyncio loop and
    report failures through ``on_error``. Blocking operations (``fetch``,
    ``render_sync``) raise to the caller.
    """

    def __init__(
        self,
        registry: Optional[Dict[str, str]] = None,
        on_all_loaded: Optional[AllLoadedCallback] = None,
        *,
        on_error: Optional[ErrorCallback] = None,
        config: Optional[TemplateCacheConfiguration] = None,
        compiler: Optional[TemplateCompiler] = None,
        transport: Optional[Transport] = None,
    ):
        """
        Initialize the cache without fetching anything.

        Args:
            registry: Template name to URL mapping, kept by reference
            on_all_loaded: Called once when every initially registered template is compiled
            on_error: Called with (name, exception) when a background load fails
            config: Cache configuration; also the source of the registry when none is given
            compiler: Compiler to use instead of one built from config
            transport: Transport to use instead of one built from config
        """
        self.config = ensure_config(config)
        self.registry: Dict[str, str] = registry if registry is not None else dict(self.config.templates)
        self.compiled: Dict[str, CompiledTemplate] = {}
        self.compiler = compiler or TemplateCompiler.from_config(self.config)
        self.transport = transport or create_transport(self.config)
        self.on_all_loaded = on_all_loaded or self._log_all_loaded
        self.on_error = on_error or self._log_failure

        self._awaiting: Set[str] = set()
        self._armed = False
        self._all_loaded_fired = False
        self._loaded = asyncio.Event()
        self._tasks: Set[asyncio.Task] = set()

    @classmethod
    def create(
        cls,
        registry: Optional[Dict[str, str]] = None,
        on_all_loaded: Optional[AllLoadedCallback] = None,
        **kwargs,
    ) -> "TemplateCache":
        """
        Build a cache and start loading every registered template.

        Must be called while an event loop is running.
        """
        cache = cls(registry, on_all_loaded, **kwargs)
        cache.load_all()
        return cache

    def load_all(self) -> None:
        """Issue one non-blocking fetch per registered template."""
        loop = asyncio.get_running_loop()
        if self._armed:
            logger.debug("load_all already started, ignoring")
            return

        self._armed = True
        self._awaiting = {name for name in self.registry if name not in self.compiled}
        logger.info(f"Loading {len(self._awaiting)} templates")

        if not self._awaiting:
            loop.call_soon(self._notify_all_loaded)
            return

        for name in list(self._awaiting):
            self._spawn(name, self._load(name))

    @property
    def pending(self) -> Set[str]:
        """Names still awaited before on_all_loaded fires."""
        return set(self._awaiting)

    @property
    def all_loaded(self) -> bool:
        return self._all_loaded_fired

    async def wait_until_loaded(self, timeout: Optional[float] = None) -> None:
        """Wait for the on_all_loaded point. Raises asyncio.TimeoutError on timeout."""
        await asyncio.wait_for(self._loaded.wait(), timeout)

    async def join(self) -> None:
        """Wait for every outstanding background task."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def register(self, name: str, url: str) -> None:
        """Add or replace a registry entry."""
        self.registry[name] = url

    def url_for(self, name: str) -> Optional[str]:
        """Return the URL registered for a name, or None."""
        return self.registry.get(name)

    def is_cached(self, name: str) -> bool:
        return name in self.compiled

    def store(self, name: str, raw: str) -> CompiledTemplate:
        """
        Compile raw markup and cache it under name, replacing any prior entry.

        Raises:
            TemplateCompileError: If the markup is malformed
        """
        if name not in self.registry:
            logger.warning(f"Storing template {name!r} that has no registry entry")

        compiled = self.compiler.compile(raw, name=name)
        self.compiled[name] = compiled
        logger.debug(f"Stored template {name!r}")

        self._check_all_loaded(name)
        return compiled

    # Fetching

    def fetch(self, name: str) -> None:
        """
        Blocking fetch and store; no-op when already cached.

        Raises:
            TemplateNotRegistered: If name has no registry entry
            TransportError: If the fetch fails
            TemplateCompileError: If the markup is malformed
        """
        if self.is_cached(name):
            return
        url = self._require_url(name, "fetch")
        get_logger(__name__, template_name=name, url=url).debug("Fetching template (blocking)")
        raw = self.transport.get_sync(url)
        self.store(name, raw)

    async def fetch_async(self, name: str) -> None:
        """Non-blocking fetch and store; no-op when already cached."""
        if self.is_cached(name):
            return
        await self._load(name)

    def prefetch(self, name: str) -> None:
        """Fire-and-forget fetch and store."""
        self._spawn(name, self._load(name))

    async def _load(self, name: str) -> CompiledTemplate:
        url = self._require_url(name, "load")
        get_logger(__name__, template_name=name, url=url).debug("Fetching template")
        raw = await self.transport.get_async(url)
        return self.store(name, raw)

    def _require_url(self, name: str, operation: str) -> str:
        url = self.url_for(name)
        if url is None:
            raise TemplateNotRegistered(name, context=ErrorContext(component="TemplateCache", operation=operation))
        return url

    # Rendering

    def render(self, name: str, variables: Optional[Mapping[str, Any]] = None) -> Optional[str]:
        """
        Render a cached template.

        When the template is not cached yet, a background fetch is started
        and None is returned; use render_async or render_sync to get the
        output of an uncached template.
        """
        if self.is_cached(name):
            logger.debug(f"Cache hit for {name!r}")
            return self.compiled[name](variables)

        logger.debug(f"Cache miss for {name!r}, fetching in background")
        self._spawn(name, self.render_async(name, variables))
        return None

    async def render_async(self, name: str, variables: Optional[Mapping[str, Any]] = None) -> str:
        """Fetch the template if needed, then render it."""
        if not self.is_cached(name):
            await self._load(name)
        return self.compiled[name](variables)

    def render_in_target(self, name: str, variables: Optional[Mapping[str, Any]], target: Any) -> None:
        """
        Render a template and append the output to target.

        Uncached templates are fetched in the background and appended once
        they arrive.
        """
        if self.is_cached(name):
            append_html(target, self.compiled[name](variables))
            return

        logger.debug(f"Cache miss for {name!r}, fetching in background")
        self._spawn(name, self.render_in_target_async(name, variables, target))

    async def render_in_target_async(
        self, name: str, variables: Optional[Mapping[str, Any]], target: Any
    ) -> None:
        html = await self.render_async(name, variables)
        append_html(target, html)

    def render_sync(self, name: str, variables: Optional[Mapping[str, Any]] = None) -> str:
        """Blocking fetch if needed, then render. Errors propagate to the caller."""
        if not self.is_cached(name):
            self.fetch(name)
        return self.compiled[name](variables)

    # Background tasks and completion

    def _spawn(self, name: str, coro: Awaitable) -> asyncio.Task:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise
        task = loop.create_task(self._guard(name, coro))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guard(self, name: str, coro: Awaitable) -> Any:
        try:
            return await coro
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._report_failure(name, e)
            return None

    def _report_failure(self, name: str, error: BaseException) -> None:
        try:
            self.on_error(name, error)
        except Exception:
            logger.exception(f"on_error callback failed for template {name!r}")

    def _check_all_loaded(self, name: str) -> None:
        if not self._armed or self._all_loaded_fired:
            return
        self._awaiting.discard(name)
        if not self._awaiting:
            self._notify_all_loaded()

    def _notify_all_loaded(self) -> None:
        if self._all_loaded_fired:
            return
        self._all_loaded_fired = True
        self._loaded.set()
        try:
            self.on_all_loaded()
        except Exception:
            logger.exception("on_all_loaded callback failed")

    @staticmethod
    def _log_all_loaded() -> None:
        logger.info("All templates loaded")

    @staticmethod
    def _log_failure(name: str, error: BaseException) -> None:
        url = getattr(error, "url", None)
        get_logger(__name__, template_name=name, url=url).error(f"Failed to load template {name!r}: {error}")
