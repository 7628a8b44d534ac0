"""
Catalog Adapters - Bridge to the live, role-scoped catalog.

The adapter pattern lets us swap implementations (in-memory for testing,
HTTP for production) without changing cache or resolver logic.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from .catalog_loader import unwrap_categories
from .errors import CatalogFetchError

logger = logging.getLogger(__name__)


class CatalogSource(ABC):
    """
    Abstract interface for fetching the category/item tree.

    Implementations return the raw category dicts for a role. The cache
    doesn't know or care where they come from.
    """

    @abstractmethod
    async def fetch_categories(self, role: str) -> list[dict]:
        """
        Fetch every category (with its items) visible to a role.

        Args:
            role: Role scope, e.g. "customer" or "buyer"

        Returns:
            List of category dicts

        Raises:
            CatalogFetchError: If the catalog cannot be fetched
        """
        pass


class HttpCatalogSource(CatalogSource):
    """
    Fetches categories from the backend, one page at a time.

    GET {base_url}/api/categories?role=<role>&skip=<n>&limit=<page_size>

    Paging stops at the first short page, or after max_pages.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        page_size: int = 100,
        max_pages: int = 50,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.max_pages = max_pages
        self._token = token
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def fetch_categories(self, role: str) -> list[dict]:
        categories: list[dict] = []

        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            for page in range(self.max_pages):
                params = {"role": role, "skip": page * self.page_size, "limit": self.page_size}
                batch = await self._fetch_page(client, params)
                categories.extend(batch)
                if len(batch) < self.page_size:
                    break
            else:
                logger.warning(f"Catalog for role {role!r} exceeded {self.max_pages} pages, truncating")

        logger.info(f"Fetched {len(categories)} categories for role {role!r}")
        return categories

    async def _fetch_page(self, client: httpx.AsyncClient, params: dict) -> list[dict]:
        try:
            resp = await client.get("/api/categories", params=params)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Catalog request failed: HTTP {e.response.status_code}")
            raise CatalogFetchError(
                f"Failed to fetch catalog: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Catalog request failed: {e}")
            raise CatalogFetchError(f"Failed to fetch catalog: {e}") from e
        except ValueError as e:
            raise CatalogFetchError(f"Catalog response is not JSON: {e}") from e

        return unwrap_categories(payload)


class InMemoryCatalogSource(CatalogSource):
    """
    In-memory source for programmatic test setup.

    Serves a fixed payload (any of the API's shapes), optionally per role,
    and counts fetches. Arm `error` to make the next fetches fail.
    """

    def __init__(self, payload=None, by_role: Optional[dict] = None):
        self.payload = payload if payload is not None else []
        self.by_role = by_role or {}
        self.error: Optional[Exception] = None
        self.fetch_count = 0
        self.roles_fetched: list[str] = []

    async def fetch_categories(self, role: str) -> list[dict]:
        self.fetch_count += 1
        self.roles_fetched.append(role)
        if self.error is not None:
            raise self.error
        return unwrap_categories(self.by_role.get(role, self.payload))
