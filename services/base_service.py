"""
Base Service Class for the Disaster Alert API
Provides common functionality for all services
"""

from abc import ABC
from typing import Optional, Dict, Any, Callable
import structlog
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from google.genai import errors as genai_errors
import httpx
from datetime import datetime, timezone

from services.storage import MemStorage

# Errors worth another attempt before giving up on the model
TRANSIENT_API_ERRORS = (genai_errors.ServerError, httpx.TimeoutException, httpx.TransportError)


class BaseService(ABC):
    """Base class for services working against the entity store"""

    # Backoff between retried API calls
    retry_wait = wait_exponential(multiplier=1, min=2, max=10)

    def __init__(self, storage: Optional[MemStorage] = None, app=None):
        """
        Initialize base service

        Args:
            storage: Entity store instance
            app: FastAPI app instance (alternative to storage)
        """
        if storage is not None:
            self.storage = storage
        elif app is not None and hasattr(app, 'state'):
            self.storage = getattr(app.state, 'storage', None)
        else:
            self.storage = None

        self.app = app
        self.logger = structlog.get_logger(self.__class__.__name__)
        self._setup()

    def _setup(self):
        """Override for service-specific setup"""
        pass

    def _handle_error(
        self,
        error: Exception,
        context: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Log an error with context and return it in a serialisable form

        Args:
            error: The exception that occurred
            context: Additional context for logging

        Returns:
            Error dict
        """
        error_info = {
            "error": str(error),
            "error_type": type(error).__name__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **context
        }

        self.logger.error(
            f"{self.__class__.__name__} error",
            **error_info
        )

        return {
            "success": False,
            "error": str(error),
            "error_type": type(error).__name__
        }

    async def _api_call_with_retry(
        self,
        func: Callable,
        *args,
        max_attempts: int = 3,
        **kwargs
    ) -> Any:
        """
        Execute API call with automatic retry logic

        Args:
            func: Async function to call
            *args: Positional arguments
            max_attempts: Total attempts before the last error is raised
            **kwargs: Keyword arguments

        Returns:
            Result from the function call

        Raises:
            The last transient error once all attempts are used up
        """

        @retry(
            stop=stop_after_attempt(max_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception_type(TRANSIENT_API_ERRORS),
            reraise=True
        )
        async def _call():
            try:
                return await func(*args, **kwargs)
            except TRANSIENT_API_ERRORS as e:
                self.logger.warning(
                    "API call failed, retrying...",
                    function=getattr(func, '__name__', repr(func)),
                    error=str(e)
                )
                raise

        return await _call()

    def _log_operation(
        self,
        operation: str,
        details: Dict[str, Any],
        level: str = "info"
    ):
        """
        Log service operation with consistent format

        Args:
            operation: Name of the operation
            details: Operation details
            level: Log level (info, warning, error)
        """
        log_func = getattr(self.logger, level, self.logger.info)
        log_func(
            f"{self.__class__.__name__}.{operation}",
            **details
        )
