"""
Infrastructure layer: client for the generative advice service with retry logic.

The advice service is opaque to this project: it receives a structured
context (ranked crops, field conditions) and answers with free text.
"""
from typing import Any, Dict, Mapping, Optional
import logging

import httpx
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from crop_advisor.config import settings

logger = logging.getLogger(__name__)

ADVICE_ENDPOINT = "/advice"


class AdviceServiceError(Exception):
    """Raised when the advice service cannot produce advice."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AdviceServiceClient:
    """
    Client for the generative advice service.
    Retries 5xx responses and transport errors with exponential backoff.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        min_wait: Optional[float] = None,
        max_wait: Optional[float] = None,
    ):
        """
        Initialize the client; unset arguments fall back to settings.

        Args:
            base_url: Service base URL (empty = advice disabled)
            api_key: Bearer token
            timeout: Request timeout in seconds
            max_attempts: Attempts per request, including the first
            min_wait: Minimum backoff between attempts in seconds
            max_wait: Maximum backoff between attempts in seconds
        """
        self.base_url = base_url if base_url is not None else settings.advice_service_url
        self.api_key = api_key if api_key is not None else settings.advice_service_api_key
        self.max_attempts = max_attempts or settings.max_retry_attempts
        self.min_wait = min_wait if min_wait is not None else settings.retry_min_wait
        self.max_wait = max_wait if max_wait is not None else settings.retry_max_wait
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "accept": "application/json",
            },
            timeout=timeout or settings.advice_timeout,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "AdviceServiceClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _send(self, endpoint: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        response = await self.client.post(endpoint, json=payload)
        if 400 <= response.status_code < 500:
            # Client errors are not retried
            raise AdviceServiceError(
                f"Advice request failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )
        response.raise_for_status()
        return response.json()

    async def _post(self, endpoint: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON payload with retry logic.

        Args:
            endpoint: Path relative to the base URL
            payload: JSON-serializable body

        Returns:
            Response data as dictionary

        Raises:
            AdviceServiceError: If the request fails after retries
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(
                    multiplier=settings.retry_backoff_multiplier,
                    min=self.min_wait,
                    max=self.max_wait,
                ),
                retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
                reraise=True,
            ):
                with attempt:
                    return await self._send(endpoint, payload)
        except httpx.HTTPStatusError as e:
            raise AdviceServiceError(
                f"Advice service error: {e.response.status_code} - {e.response.text}"
            ) from e
        except httpx.RequestError as e:
            raise AdviceServiceError(f"Advice service request error: {str(e)}") from e

    async def generate_advice(self, context: Mapping[str, Any]) -> str:
        """
        Ask the advice service to phrase a recommendation.

        Args:
            context: Structured recommendation context

        Returns:
            Natural-language advice

        Raises:
            AdviceServiceError: If the service is not configured, fails,
                or answers without text
        """
        if not self.is_configured:
            raise AdviceServiceError("Advice service is not configured", status_code=503)

        data = await self._post(ADVICE_ENDPOINT, {"context": context})
        text = data.get("text") if isinstance(data, dict) else None
        if not isinstance(text, str) or not text.strip():
            raise AdviceServiceError("Advice service returned no text")
        return text.strip()
