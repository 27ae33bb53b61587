"""REST client for retrieving connection group trees from a Guacamole server.

Classes:
    GuacamoleClient: Fetches connection group trees over the REST API
"""

import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import aiohttp

from ..importer.errors import HierarchyFetchError
from ..importer.interfaces import GroupHierarchyProvider
from ..importer.models import ROOT_GROUP_IDENTIFIER, GroupNode

logger = logging.getLogger(__name__)

TOKEN_HEADER = "Guacamole-Token"


class GuacamoleClient(GroupHierarchyProvider):
    """Group hierarchy provider backed by the Guacamole REST API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout_seconds: float = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the web application, e.g. https://host/guacamole
            token: Authentication token, if already known
            timeout_seconds: Total timeout for each request
            session: Existing aiohttp session to reuse; a new one is opened per
                request when omitted
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_seconds = timeout_seconds
        self._session = session

    def tree_url(self, data_source: str) -> str:
        return (
            f"{self.base_url}/api/session/data/{quote(data_source, safe='')}"
            f"/connectionGroups/{ROOT_GROUP_IDENTIFIER}/tree"
        )

    async def authenticate(self, username: str, password: str) -> str:
        """Obtain an authentication token with a username and password.

        Returns:
            The new authentication token, which is also kept for later requests

        Raises:
            HierarchyFetchError: If authentication fails
        """
        data = await self._request(
            "POST",
            f"{self.base_url}/api/tokens",
            data={"username": username, "password": password},
        )

        token = data.get("authToken") if isinstance(data, dict) else None
        if not token:
            raise HierarchyFetchError("Authentication response did not contain a token")

        logger.info(f"Authenticated as '{username}'")
        self.token = token
        return token

    async def fetch_tree(self, data_source: str) -> GroupNode:
        """Fetch the connection group tree of a data source.

        Raises:
            HierarchyFetchError: If the request fails or the response is malformed
        """
        headers = {TOKEN_HEADER: self.token} if self.token else {}
        data = await self._request("GET", self.tree_url(data_source), headers=headers)

        try:
            root = GroupNode.from_dict(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise HierarchyFetchError(
                f"Malformed connection group tree for data source '{data_source}': {e}",
                data_source=data_source,
            ) from e

        logger.info(f"Fetched connection group tree for data source '{data_source}'")
        return root

    async def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        """Send a request and decode its JSON body."""
        if self._session is not None:
            return await self._send(self._session, method, url, **kwargs)

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            return await self._send(session, method, url, **kwargs)

    async def _send(self, session, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        logger.debug(f"{method} {url}")
        try:
            async with session.request(method, url, **kwargs) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise HierarchyFetchError(f"HTTP {response.status} from {url}: {body}")
                return await response.json()
        except aiohttp.ClientError as e:
            raise HierarchyFetchError(f"Request to {url} failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise HierarchyFetchError(f"Request to {url} timed out") from e
