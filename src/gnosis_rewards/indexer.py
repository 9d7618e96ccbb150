"""Validator counts from the beacon chain indexer REST API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import requests

from .config import ClientConfig
from .exceptions import NetworkError

logger = logging.getLogger(__name__)


class ValidatorCountService:
    """Count validators whose withdrawal credentials point at an address."""

    def __init__(self, config: ClientConfig, session: requests.Session | None = None) -> None:
        self._config = config
        self._session = session or requests.Session()

    def endpoint(self, address: str) -> str:
        return f"{self._config.indexer_url}/validator/withdrawalCredentials/{address}"

    async def get_validator_count(self, address: str) -> int:
        """Return the number of validators for ``address``, or 0 on any failure.

        Partial counts are never returned: an error on any page discards the
        pages fetched before it.
        """

        try:
            return await asyncio.to_thread(self._count, address)
        except NetworkError as exc:
            logger.error("Failed to fetch validator count for %s: %s", address, exc)
            return 0

    def _count(self, address: str) -> int:
        limit = self._config.indexer_page_size
        max_pages = self._config.indexer_max_pages
        offset = 0
        total = 0

        for _ in range(max_pages):
            items = self._fetch_page(address, limit=limit, offset=offset)
            if items is None:
                break

            total += len(items)
            if len(items) < limit:
                break
            offset += limit
        else:
            raise NetworkError(
                f"Validator indexer did not finish within {max_pages} pages",
                endpoint=self.endpoint(address),
                details={"limit": limit, "max_pages": max_pages},
            )

        logger.debug("Indexer reports %d validators for %s", total, address)
        return total

    def _fetch_page(self, address: str, *, limit: int, offset: int) -> list[Any] | None:
        url = self.endpoint(address)
        try:
            response = self._session.get(
                url,
                params={"limit": limit, "offset": offset},
                timeout=self._config.request_timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise NetworkError(
                "Validator indexer request failed",
                endpoint=url,
                status_code=getattr(getattr(exc, "response", None), "status_code", None),
                details={"offset": offset, "error": str(exc)},
            ) from exc
        except ValueError as exc:
            raise NetworkError(
                "Validator indexer returned invalid JSON",
                endpoint=url,
                details={"offset": offset, "error": str(exc)},
            ) from exc

        data = payload.get("data") if isinstance(payload, Mapping) else None
        if not isinstance(data, list):
            logger.warning("Indexer response missing 'data' list at offset %d", offset)
            return None
        return data
