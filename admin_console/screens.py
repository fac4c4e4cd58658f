"""
Admin screens

An AdminScreen wires a resource client, its list controller and its mutation
controller together, sharing one notice board. Presentation layers drive the
screen and render from `screen.listing.state`, `screen.mutations.modal` and
`screen.notices`.
"""
import logging
from typing import Optional

import httpx

from . import config
from .client import ResourceClient
from .listing import ListController
from .mutations import MutationController
from .notices import NoticeBoard
from .resources import Resource

logger = logging.getLogger(__name__)


def open_session(base_url: Optional[str] = None, token: Optional[str] = None, **kwargs) -> httpx.AsyncClient:
    """An HTTP session against the admin API, authenticated with a bearer token."""
    token = token if token is not None else config.ADMIN_API_TOKEN
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=base_url or config.ADMIN_API_URL, headers=headers, **kwargs)


class AdminScreen:
    def __init__(self, resource: Resource, http: httpx.AsyncClient, notices: Optional[NoticeBoard] = None,
                 debounce: Optional[float] = None):
        self.resource = resource
        self.notices = notices if notices is not None else NoticeBoard()
        self.client = ResourceClient(http, resource)
        self.listing = ListController(
            self.client, self.notices, config.ADMIN_SEARCH_DEBOUNCE if debounce is None else debounce,
        )
        self.mutations = MutationController(self.client, self.listing, self.notices)

    async def open(self) -> None:
        """Load the first page."""
        logger.info(f"Opening {self.resource.name} screen")
        await self.listing.refetch()

    async def close(self) -> None:
        self.mutations.close()
        await self.listing.close()
