"""Paginated drive listing that follows @odata.nextLink until exhausted."""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from onedrive_transfer.graph.client import FetchFailed, GraphClient
from onedrive_transfer.graph.models import (
    LISTING_COLUMNS,
    ODATA_NEXT_LINK,
    ODATA_VALUE,
    ItemRecord,
    ListingPage,
)

logger = logging.getLogger(__name__)

HTTP_OK = 200


def iter_raw_pages(
    client: GraphClient, endpoint_url: str
) -> Iterator[tuple[list[dict[str, Any]], str | None]]:
    """Yield ``(values, next_link)`` for each page of a collection endpoint.

    One GET is issued per advancement. The loop ends only when a page has no
    ``@odata.nextLink``; an empty page that carries one is followed.

    Args:
        client: Authenticated GraphClient.
        endpoint_url: First page, relative to the client's base URL or absolute.

    Raises:
        FetchFailed: If a page request does not return 200. No further pages
            are requested.
    """
    next_link: str | None = endpoint_url
    page_number = 0
    while next_link:
        response = client.send("GET", next_link)
        if response.status != HTTP_OK:
            logger.error(
                "[iter_raw_pages] listing request failed; page:%d;status:%d",
                page_number,
                response.status,
            )
            raise FetchFailed(response.status, response.error_detail(), response.text)

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchFailed(response.status, "invalid listing body", response.text) from exc
        if not isinstance(payload, dict) or not isinstance(payload.get(ODATA_VALUE, []), list):
            raise FetchFailed(response.status, "invalid listing body", response.text)

        values = payload.get(ODATA_VALUE) or []
        next_link = payload.get(ODATA_NEXT_LINK) or None
        logger.debug(
            "[iter_raw_pages] fetched page; page:%d;item_count:%d;has_next:%s",
            page_number,
            len(values),
            next_link is not None,
        )
        page_number += 1
        yield values, next_link


def iter_pages(client: GraphClient, endpoint_url: str) -> Iterator[ListingPage]:
    """Yield each listing page with its entries parsed into ItemRecords."""
    for values, next_link in iter_raw_pages(client, endpoint_url):
        yield ListingPage(
            items=tuple(ItemRecord.from_json(raw) for raw in values),
            next_link=next_link,
        )


def iter_items(client: GraphClient, endpoint_url: str) -> Iterator[ItemRecord]:
    """Lazily yield every item across all pages, in page order."""
    for page in iter_pages(client, endpoint_url):
        yield from page.items


def list_all(client: GraphClient, endpoint_url: str) -> list[ItemRecord]:
    """Fetch every page of a listing endpoint and return the merged items.

    Args:
        client: Authenticated GraphClient.
        endpoint_url: First page, relative to the client's base URL or absolute.

    Returns:
        All items in page order.

    Raises:
        FetchFailed: If any page request does not return 200.
    """
    results = list(iter_items(client, endpoint_url))
    logger.info("[list_all] listing complete; item_count:%d", len(results))
    return results


def write_listing_csv(records: Iterable[ItemRecord], path: str | Path) -> int:
    """Write listing records as CSV with LISTING_COLUMNS as the header.

    Nullable columns are written as empty cells.

    Returns:
        Number of data rows written.
    """
    count = 0
    with open(path, "w", encoding="utf-8", newline="") as fh:
        writer = csv.DictWriter(fh, fieldnames=LISTING_COLUMNS)
        writer.writeheader()
        for record in records:
            writer.writerow(record.to_row())
            count += 1
    logger.info("[write_listing_csv] wrote listing; path:%s;row_count:%d", path, count)
    return count
