"""
REST client for one admin resource.

Wraps an httpx.AsyncClient pointed at the admin API. Every response is
normalized here: list responses become a PagedResult, entity responses become
the bare entity whatever wrapper the endpoint uses, and every failure becomes
one of the ResourceError subclasses below.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .pagination import clamp_page, resolve_page_limit
from .resources import Entity, Resource

logger = logging.getLogger(__name__)


class ResourceError(Exception):
    """A failed admin operation. `message` is shown to the user as is."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(ResourceError):
    """Rejected locally; no request was sent."""


class TransportError(ResourceError):
    """The request did not reach the server or the reply could not be read."""


class ServerError(ResourceError):
    """The server answered with a non-2xx status."""


@dataclass(frozen=True)
class PagedResult:
    items: List[Entity]
    total_pages: int
    current_page: int
    page_limit: int


def error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return None


class ResourceClient:
    def __init__(self, http: httpx.AsyncClient, resource: Resource):
        self.http = http
        self.resource = resource

    def _url(self, entity_id: Optional[str] = None, suffix: str = "") -> str:
        url = self.resource.path
        if entity_id is not None:
            url = f"{url}/{entity_id}"
        return url + suffix

    async def _request(self, method: str, url: str, failure: str, expect_body: bool = True, **kwargs) -> Any:
        try:
            response = await self.http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning(f"{method} {url} failed: {exc!r}")
            raise TransportError(failure) from exc

        if not response.is_success:
            raise ServerError(error_message(response) or failure, response.status_code)
        if not expect_body or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(failure, response.status_code) from exc

    def normalize_entity(self, body: Any) -> Optional[Entity]:
        """The entity inside a response body, or None when there is none."""
        if not isinstance(body, dict):
            return None
        key = self.resource.wrapper_key
        if key and isinstance(body.get(key), dict):
            return body[key]
        if self.resource.id_field in body:
            return body
        return None

    def normalize_page(self, body: Any, page: int) -> PagedResult:
        failure = self.resource.failure("fetch", self.resource.name)
        if not isinstance(body, dict):
            raise TransportError(failure)
        items = body.get(self.resource.items_key) or []
        if not isinstance(items, list):
            raise TransportError(failure)
        total_pages = body.get("totalPages")
        if not isinstance(total_pages, int) or isinstance(total_pages, bool) or total_pages < 1:
            total_pages = 1
        return PagedResult(
            items=items,
            total_pages=total_pages,
            current_page=clamp_page(page, total_pages),
            page_limit=resolve_page_limit(body.get("pageLimit"), len(items)),
        )

    async def list(self, page: int = 1, search: str = "") -> PagedResult:
        body = await self._request(
            "GET", self._url(), self.resource.failure("fetch", self.resource.name),
            params={"page": page, "search": search},
        )
        return self.normalize_page(body, page)

    async def create(self, payload: Dict[str, Any]) -> Entity:
        failure = self.resource.failure("create")
        entity = self.normalize_entity(await self._request("POST", self._url(), failure, json=payload))
        if self.resource.identity(entity) is None:
            raise TransportError(failure)
        return entity

    async def update(self, entity_id: str, payload: Dict[str, Any], failure: Optional[str] = None) -> Optional[Entity]:
        body = await self._request("PUT", self._url(entity_id), failure or self.resource.failure("update"), json=payload)
        return self.normalize_entity(body)

    async def patch_status(self, entity_id: str, payload: Dict[str, Any]) -> Optional[Entity]:
        failure = self.resource.failure("update", f"{self.resource.label} status")
        body = await self._request("PATCH", self._url(entity_id, "/status"), failure, json=payload)
        return self.normalize_entity(body)

    async def remove(self, entity_id: str) -> None:
        await self._request("DELETE", self._url(entity_id), self.resource.failure("delete"), expect_body=False)
