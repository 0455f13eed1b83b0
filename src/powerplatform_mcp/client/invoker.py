"""
Authenticated REST invoker

Sends one bearer-authenticated request per call over a shared httpx client
and normalizes non-success responses into error documents.
"""

from typing import Any, Dict, Optional
import httpx
import structlog

from ..auth import IAuthProvider
from ..errors import build_error_envelope, normalize_error_response

logger = structlog.get_logger(__name__)


class RestInvoker:
    """HTTP invoker shared by the Dataverse and Power Automate clients"""

    def __init__(
        self,
        auth_provider: IAuthProvider,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.auth_provider = auth_provider
        self.timeout = timeout
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Process-wide client, created on first use so it binds to the serving loop"""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
            logger.debug("HTTP client created", timeout=self.timeout)
        return self._http_client

    async def send(
        self,
        method: str,
        url: str,
        scope: str,
        headers: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Acquire a token for the scope and send a single request.

        Args:
            method: HTTP method (GET, POST, PATCH)
            url: Fully built request URL
            scope: Token audience scope
            headers: Extra headers, applied over the defaults
            json: Optional JSON body

        Returns:
            The raw response, whatever its status
        """
        token = await self.auth_provider.get_token(scope)

        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)
        request_headers["Authorization"] = f"Bearer {token}"

        logger.debug("Sending request", method=method, url=url)
        return await self.http_client.request(method, url, headers=request_headers, json=json)

    async def request_json(
        self,
        method: str,
        url: str,
        scope: str,
        headers: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        operation: str = "request",
    ) -> Dict[str, Any]:
        """
        Send a request and return its JSON document.

        Returns:
            The success body, or a normalized ``{"error": {...}}`` document
        """
        response = await self.send(method, url, scope, headers=headers, json=json)

        if not response.is_success:
            logger.error(
                f"{operation} FAILED",
                method=method,
                url=url,
                status_code=response.status_code,
                reason=response.reason_phrase,
                body=response.text,
            )
            return normalize_error_response(response)

        if not response.content:
            return {}

        try:
            result: Dict[str, Any] = response.json()
        except ValueError:
            content_type = response.headers.get("Content-Type", "no content type")
            logger.error(
                f"{operation} returned a non-JSON body",
                url=url,
                status_code=response.status_code,
                content_type=content_type,
                body=response.text,
            )
            return build_error_envelope(
                response.status_code,
                f"Expected a JSON response but received {content_type}",
                response.text,
            )

        logger.info(f"{operation} succeeded", status_code=response.status_code,
                    size_bytes=len(response.content))
        return result

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            logger.debug("HTTP client closed")
