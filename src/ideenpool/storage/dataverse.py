"""Dataverse Web API store using httpx."""

from __future__ import annotations

import logging
import uuid
from typing import Any

import httpx

from ideenpool.config import Config
from ideenpool.core.mapper import FIELD_MAP, entity_id_from_location
from ideenpool.errors import AuthorizationError, ConfigurationError, PlatformError
from ideenpool.storage.base import IdeaStore

logger = logging.getLogger(__name__)

_ODATA_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
    "OData-MaxVersion": "4.0",
    "OData-Version": "4.0",
    "Prefer": 'odata.include-annotations="*"',
}


class DataverseStore(IdeaStore):
    """Idea store backed by the Dataverse OData v4 Web API.

    Every call is a single attempt. Failures raise immediately.
    """

    def __init__(
        self,
        config: Config,
        token: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not config.platform_url:
            raise ConfigurationError("DATAVERSE_URL is not set")
        if not token:
            raise ConfigurationError("No access token available")
        self._config = config
        self._token = token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def initialize(self) -> None:
        self._connect()

    def _connect(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.api_base_url,
                headers={**_ODATA_HEADERS, "Authorization": f"Bearer {self._token}"},
                timeout=self._config.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def _table(self) -> str:
        return self._config.table_name

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = self._connect()
        logger.debug("%s %s", method, url)
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Dataverse request failed: %s %s: %s", method, url, e)
            raise PlatformError(None, str(e) or type(e).__name__) from e
        return response

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        details = _error_details(response)
        logger.error("Dataverse %s error: %s %s", action, response.status_code, details)
        if response.status_code in (401, 403):
            raise AuthorizationError(
                "Token expired or invalid. Please paste a new token."
                f" (Dataverse {response.status_code}: {details})"
            )
        if response.status_code == 404 and action == "list":
            logger.error("Table %r not found. Check the entity set name.", self._table)
        raise PlatformError(response.status_code, details)

    async def list_records(self, *, status_code: int | None = None) -> list[dict[str, Any]]:
        params = {"$orderby": f"{FIELD_MAP['created_on']} desc"}
        if status_code is not None:
            params["$filter"] = f"{FIELD_MAP['status']} eq {int(status_code)}"
        response = await self._request("GET", self._table, params=params)
        self._raise_for_status(response, "list")
        return list(response.json().get("value") or [])

    async def get_record(self, record_id: str) -> dict[str, Any] | None:
        response = await self._request("GET", f"{self._table}({record_id})")
        if response.status_code == 404:
            return None
        self._raise_for_status(response, "get")
        return response.json()

    async def insert_record(self, body: dict[str, Any]) -> str:
        response = await self._request("POST", self._table, json=body)
        self._raise_for_status(response, "create")
        new_id = entity_id_from_location(response.headers.get("OData-EntityId"))
        if not new_id:
            logger.warning("Create response carried no OData-EntityId, generating an id")
            new_id = str(uuid.uuid4())
        logger.info("Created record %s", new_id)
        return new_id

    async def patch_record(self, record_id: str, body: dict[str, Any]) -> None:
        response = await self._request("PATCH", f"{self._table}({record_id})", json=body)
        self._raise_for_status(response, "update")
        logger.info("Updated record %s: %s", record_id, ", ".join(body))

    async def find_user_id(self, directory_id: str) -> str | None:
        params = {
            "$select": "systemuserid",
            "$filter": f"azureactivedirectoryobjectid eq '{directory_id}'",
        }
        response = await self._request("GET", "systemusers", params=params)
        self._raise_for_status(response, "user lookup")
        users = response.json().get("value") or []
        if not users:
            logger.warning("No platform user for directory id %s", directory_id)
            return None
        return users[0].get("systemuserid")


def _error_details(response: httpx.Response) -> str:
    """Best-effort extraction of the platform's error message."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase or "No details available"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return str(body)
