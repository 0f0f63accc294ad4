"""Anthropic Messages API client built on httpx."""

import logging
from enum import Enum
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.anthropic.com"
DEFAULT_API_VERSION = "2023-06-01"

MODELS_PAGE_SIZE = 100


class ProviderErrorKind(str, Enum):
    """Classification of AI provider failures."""

    AUTH = "auth"
    PERMISSION = "permission"
    RATE_LIMIT = "rate_limit"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNPROCESSABLE = "unprocessable"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    UNKNOWN = "unknown"


STATUS_KINDS: dict[int, ProviderErrorKind] = {
    400: ProviderErrorKind.BAD_REQUEST,
    401: ProviderErrorKind.AUTH,
    403: ProviderErrorKind.PERMISSION,
    404: ProviderErrorKind.NOT_FOUND,
    409: ProviderErrorKind.CONFLICT,
    422: ProviderErrorKind.UNPROCESSABLE,
    429: ProviderErrorKind.RATE_LIMIT,
}


def kind_for_status(status_code: int) -> ProviderErrorKind:
    if status_code in STATUS_KINDS:
        return STATUS_KINDS[status_code]
    if status_code >= 500:
        return ProviderErrorKind.SERVER_ERROR
    return ProviderErrorKind.UNKNOWN


class ProviderError(Exception):
    """Any failure talking to the AI provider.

    ``message`` holds provider diagnostics and is not meant for end users.
    """

    def __init__(self, kind: ProviderErrorKind, message: str, status_code: int | None = None):
        self.kind = kind
        self.message = message
        self.status_code = status_code
        super().__init__(f"{kind.value}: {message}")


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:500]
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.text[:500]


class AIClient:
    """Async client for the Messages and Models endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 120.0,
    ):
        """
        Initialize the client.

        Args:
            base_url: Provider base URL
            api_version: Value of the anthropic-version header
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={
                "anthropic-version": api_version,
                "content-type": "application/json",
                "accept": "application/json",
            },
        )

        logger.info(f"AI client initialized: base_url={self.base_url}, timeout={timeout}s")

    async def _request(
        self,
        method: str,
        path: str,
        api_key: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            if method == "POST":
                response = await self._client.post(
                    path, json=json, headers={"x-api-key": api_key}
                )
            else:
                response = await self._client.get(
                    path, params=params, headers={"x-api-key": api_key}
                )

            if response.status_code >= 400:
                raise ProviderError(
                    kind_for_status(response.status_code),
                    f"HTTP {response.status_code}: {_error_detail(response)}",
                    status_code=response.status_code,
                )

            return response.json()

        except httpx.TimeoutException as e:
            raise ProviderError(
                ProviderErrorKind.TIMEOUT, f"Request timed out after {self.timeout}s: {e}"
            )

        except httpx.RequestError as e:
            raise ProviderError(ProviderErrorKind.CONNECTION, f"Request failed: {e}")

        except ProviderError:
            raise

        except Exception as e:
            raise ProviderError(ProviderErrorKind.UNKNOWN, f"Unexpected provider error: {e}")

    async def create_message(
        self,
        *,
        api_key: str,
        system: str,
        messages: list[dict[str, str]],
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        """
        Send one Messages API request.

        Returns:
            Text of the response content blocks

        Raises:
            ProviderError: On any transport, HTTP or payload failure
        """
        payload = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system": system,
            "messages": messages,
        }
        logger.debug(f"Creating message with model={model}, max_tokens={max_tokens}")

        data = await self._request("POST", "/v1/messages", api_key, json=payload)

        blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(blocks, list):
            raise ProviderError(ProviderErrorKind.UNKNOWN, "Response has no content blocks")

        return "".join(
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        )

    async def list_models(self, api_key: str) -> dict[str, str]:
        """
        Fetch all available models, following pagination.

        Returns:
            Mapping of model id to display name, in provider order
        """
        models: dict[str, str] = {}
        params: dict[str, Any] = {"limit": MODELS_PAGE_SIZE}

        while True:
            data = await self._request("GET", "/v1/models", api_key, params=params)
            for entry in data.get("data", []):
                model_id = entry.get("id")
                if model_id:
                    models[model_id] = entry.get("display_name") or model_id

            last_id = data.get("last_id")
            if not data.get("has_more") or not last_id:
                break
            params = {"limit": MODELS_PAGE_SIZE, "after_id": last_id}

        logger.info(f"Fetched {len(models)} models from provider")
        return models

    async def close(self):
        """Close the HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
