"""Backward pagination over Travis CI's numbered builds.

The builds endpoint only supports walking backwards: each page holds the
``items_per_page`` builds numbered just below ``after_number``. Knowing the
lowest build number on the newest page is enough to compute every cursor
needed to reach the row budget, so all remaining pages can be requested at
once instead of one after another.
"""

import asyncio
import logging
from typing import List

from travis_connector.core.exceptions import BatchFailure, ExhaustedRetries, MalformedResponse
from travis_connector.core.travis_client import TravisClient
from travis_connector.models.builds import BuildsPage, PageRequest

logger = logging.getLogger(__name__)


def max_pages_for(start_cursor: int, row_limit: int, items_per_page: int, until_build: int = 0) -> int:
    """Number of pages to request after the first one.

    The first page already counts against ``row_limit``. During an incremental
    refresh the count is further capped so the walk stops at ``until_build``.
    """
    max_pages = (row_limit - items_per_page) // items_per_page
    if until_build > 0:
        # Pages holding the builds strictly between until_build and start_cursor.
        # floor((start - until) / per_page) would miss some: 100 and 90 give 0 pages, losing 91-99
        pages_to_watermark = -(-(start_cursor - until_build - 1) // items_per_page)
        max_pages = min(max_pages, pages_to_watermark)
    return max(max_pages, 0)


def plan_pages(
    path: str,
    start_cursor: int,
    row_limit: int,
    items_per_page: int,
    until_build: int = 0,
) -> List[PageRequest]:
    """Compute the page requests that walk backwards from start_cursor."""
    max_pages = max_pages_for(start_cursor, row_limit, items_per_page, until_build)

    requests = []
    after_number = start_cursor
    while after_number > 1 and len(requests) < max_pages:
        requests.append(PageRequest(path=path, after_number=after_number))
        after_number -= items_per_page

    return requests


async def fetch_pages(client: TravisClient, page_requests: List[PageRequest]) -> List[BuildsPage]:
    """Fetch all pages concurrently, failing the whole batch on the first error.

    Pages come back in the order they were requested. Requests still in
    flight when one fails are left to finish on their own.
    """
    if not page_requests:
        return []

    logger.info(f"Fetching {len(page_requests)} pages concurrently")
    try:
        return await asyncio.gather(
            *(asyncio.to_thread(client.get_page, page_request) for page_request in page_requests)
        )
    except (ExhaustedRetries, MalformedResponse) as e:
        logger.error(f"Batch of {len(page_requests)} pages failed: {e.message}")
        raise BatchFailure(e.message, len(page_requests)) from e
