"""State managers for process-wide shared resources.

The template engine is the only shared mutable resource in autoformat. It is
built lazily through a OnceCell so that any number of concurrent first
callers (event-loop tasks or threadpool workers) trigger exactly one build,
and every caller observes the same outcome: the same engine object, or the
same cached exception.
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Generic, TypeVar

from autoformat.exceptions import TemplateInitError
from autoformat.logging_config import get_logger, log_with_context

if TYPE_CHECKING:
    from autoformat.views.template_renderer import TemplateEngine

logger = get_logger(__name__)

T = TypeVar("T")


class StateManager(ABC):
    """Base class for all state managers.

    State managers own shared application state. Subclasses implement the
    lifecycle hooks called from the application lifespan.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the state manager (called during app startup)."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Cleanup resources (called during app shutdown)."""
        pass


class OnceCell(Generic[T]):
    """Compute-once cell that memoizes either a value or the raised exception.

    The factory runs at most once for the lifetime of the cell. Readers after
    initialization take no lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._done = False
        self._value: T | None = None
        self._error: Exception | None = None

    @property
    def is_initialized(self) -> bool:
        """Whether the factory has already run (successfully or not)."""
        return self._done

    @property
    def error(self) -> Exception | None:
        """The cached exception, if initialization failed."""
        return self._error

    def get_or_init(self, factory: Callable[[], T]) -> T:
        """Return the cached value, running factory first if nobody has yet.

        Args:
            factory: Builds the value; only called by the first caller

        Returns:
            The cached value

        Raises:
            Exception: The exception raised by factory, re-raised to every caller
        """
        if not self._done:
            with self._lock:
                if not self._done:
                    try:
                        self._value = factory()
                    except Exception as e:
                        self._error = e
                    self._done = True

        if self._error is not None:
            # Same object every time; its traceback only holds the current raise
            raise self._error.with_traceback(None)
        return self._value  # type: ignore[return-value]


class TemplateEngineManager(StateManager):
    """Owns the lazily built, process-wide template engine.

    A failed build is cached as a TemplateInitError and never retried.
    """

    def __init__(self, factory: Callable[[], "TemplateEngine"]):
        """Initialize the manager.

        Args:
            factory: Builds the engine; called at most once
        """
        self._factory = factory
        self._cell: "OnceCell[TemplateEngine]" = OnceCell()

    async def initialize(self) -> None:
        """Warm the engine at startup so the first request does not pay for it.

        Failures are logged and cached, never raised: the application still
        starts and answers HTML requests with the diagnostic page.
        """
        try:
            self.get_engine()
        except TemplateInitError as e:
            log_with_context(
                logger,
                "error",
                "Template engine failed to initialize",
                error=e.message,
                event_type="template_engine_init_failed",
            )

    async def cleanup(self) -> None:
        """Nothing to release; the outcome lives for the whole process."""
        pass

    def get_engine(self) -> "TemplateEngine":
        """Return the shared engine, building it on first use.

        Raises:
            TemplateInitError: The cached initialization failure
        """
        return self._cell.get_or_init(self._build)

    def status(self) -> str:
        """Short status string for readiness checks."""
        if not self._cell.is_initialized:
            return "not_initialized"
        error = self._cell.error
        if error is None:
            return "ok"
        return f"failed: {str(error)[:80]}"

    def _build(self) -> "TemplateEngine":
        log_with_context(
            logger,
            "info",
            "Initializing template engine",
            event_type="template_engine_init",
        )
        try:
            engine = self._factory()
        except TemplateInitError:
            raise
        except Exception as e:
            raise TemplateInitError(f"{type(e).__name__}: {e}") from e

        log_with_context(
            logger,
            "info",
            "Template engine ready",
            template_count=len(engine.templates),
            event_type="template_engine_ready",
        )
        return engine
