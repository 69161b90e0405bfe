"""Appwrite REST client for accounts, sessions and documents."""

import json
import logging
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from .models import AppwriteSettings

logger = logging.getLogger(__name__)

UNIQUE_ID = "unique()"


class AppwriteException(Exception):
    """Error reported by the Appwrite service or raised on transport failure."""

    def __init__(self, message: str, code: int = 0, type: str = "") -> None:
        self.message = message
        self.code = code
        self.type = type
        super().__init__(message)


class Query:
    """Builders for Appwrite query strings."""

    @staticmethod
    def equal(attribute: str, value: Any) -> str:
        values = value if isinstance(value, list) else [value]
        return json.dumps({"method": "equal", "attribute": attribute, "values": values})


class AppwriteClient:
    """Async client for the subset of the Appwrite API the storefront uses."""

    def __init__(
        self,
        settings: AppwriteSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the Appwrite client.

        Args:
            settings: Project endpoint, ID and collection IDs
            transport: Optional httpx transport (used by tests)
        """
        self.settings = settings
        self.client = httpx.AsyncClient(
            base_url=settings.endpoint,
            timeout=30.0,
            transport=transport,
            headers={
                "X-Appwrite-Project": settings.project_id,
                "X-Appwrite-Response-Format": "1.5.0",
                "Content-Type": "application/json",
                "User-Agent": f"fastfood-mcp-server ({settings.platform})",
            },
        )

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[list[tuple[str, str]]] = None,
        body: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        try:
            response = await self.client.request(method, path, params=params, json=body)
        except httpx.TransportError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise AppwriteException("Network request failed", type="network_error") from e

        # Appwrite echoes the session here when the cookie cannot be set
        fallback_cookies = response.headers.get("X-Fallback-Cookies")
        if fallback_cookies:
            self.client.headers["X-Fallback-Cookies"] = fallback_cookies

        if response.status_code >= 400:
            try:
                data = response.json()
            except ValueError:
                data = {}
            message = data.get("message") or response.reason_phrase
            logger.debug(f"{method} {path} -> {response.status_code} {data.get('type', '')}")
            raise AppwriteException(message, code=response.status_code, type=data.get("type", ""))

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    # Account

    async def create_account(self, email: str, password: str, name: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/account",
            body={"userId": UNIQUE_ID, "email": email, "password": password, "name": name},
        )

    async def create_email_session(self, email: str, password: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/account/sessions/email", body={"email": email, "password": password}
        )

    async def delete_current_session(self) -> None:
        """End the current session. The local session is dropped even if the request fails."""
        try:
            await self._request("DELETE", "/account/sessions/current")
        finally:
            self.client.cookies.clear()
            self.client.headers.pop("X-Fallback-Cookies", None)

    async def get_account(self) -> dict[str, Any]:
        return await self._request("GET", "/account")

    # Databases

    def _documents_path(self, collection_id: str) -> str:
        return f"/databases/{self.settings.database_id}/collections/{collection_id}/documents"

    async def list_documents(
        self, collection_id: str, queries: Optional[list[str]] = None
    ) -> list[dict[str, Any]]:
        params = [("queries[]", q) for q in queries or []]
        data = await self._request("GET", self._documents_path(collection_id), params=params)
        return data.get("documents", [])

    async def get_document(self, collection_id: str, document_id: str) -> dict[str, Any]:
        return await self._request("GET", f"{self._documents_path(collection_id)}/{document_id}")

    async def create_document(self, collection_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request(
            "POST",
            self._documents_path(collection_id),
            body={"documentId": UNIQUE_ID, "data": data},
        )

    # Avatars

    def avatar_initials_url(self, name: str) -> str:
        query = urlencode({"name": name, "project": self.settings.project_id})
        return f"{self.settings.endpoint}/avatars/initials?{query}"

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
