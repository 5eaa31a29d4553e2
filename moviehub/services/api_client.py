from typing import Any, Dict, Optional
import logging

import httpx

from moviehub.config import API_BASE_URL, API_TIMEOUT
from moviehub.errors import NetworkUnreachable, RemoteRejected
from moviehub.services.session_service import SessionContext

logger = logging.getLogger(__name__)


# HTTP collaborator for the MovieHub REST service
class MovieHubAPI:
    def __init__(
        self,
        session: Optional[SessionContext] = None,
        base_url: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._session = session
        self._client = httpx.AsyncClient(
            base_url=base_url or API_BASE_URL,
            timeout=timeout or API_TIMEOUT,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def _auth_headers(self) -> Dict[str, str]:
        current = self._session.current() if self._session else None
        if current and current.token:
            return {"Authorization": f"Bearer {current.token}"}
        return {}

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        """Pull the server-supplied message out of an error response."""
        try:
            body = response.json()
        except ValueError:
            return response.text.strip()
        if isinstance(body, str):
            return body
        if isinstance(body, dict):
            return str(body.get("message") or body.get("detail") or body.get("error") or "")
        return ""

    async def request(self, method: str, endpoint: str, json: Any = None, params: Dict = None) -> Any:
        """
        Make an HTTP request to the MovieHub service.

        Args:
            method: HTTP verb
            endpoint: API endpoint (e.g., "/movies")
            json: Optional JSON body
            params: Query parameters

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            NetworkUnreachable: If no response was received
            RemoteRejected: If the service answered with a 4xx/5xx status
        """
        try:
            response = await self._client.request(
                method, endpoint, json=json, params=params, headers=self._auth_headers()
            )
        except httpx.TransportError as e:
            logger.error(f"MovieHub API unreachable for {method} {endpoint}: {str(e)}")
            raise NetworkUnreachable(f"{method} {endpoint} failed: {str(e)}") from e

        if response.status_code >= 400:
            detail = self._error_detail(response)
            logger.warning(f"MovieHub API {method} {endpoint} returned {response.status_code}: {detail}")
            if response.status_code == 401 and self._session is not None:
                # Token rejected, force the user back through login
                await self._session.clear()
            raise RemoteRejected(response.status_code, detail)

        logger.debug(f"MovieHub API request successful: {method} {endpoint}")
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            # Some endpoints answer with a bare text confirmation
            return response.text

    async def get(self, endpoint: str, params: Dict = None) -> Any:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, json: Any = None) -> Any:
        return await self.request("POST", endpoint, json=json)

    async def put(self, endpoint: str, json: Any = None) -> Any:
        return await self.request("PUT", endpoint, json=json)

    async def delete(self, endpoint: str) -> Any:
        return await self.request("DELETE", endpoint)

    async def aclose(self) -> None:
        await self._client.aclose()
