import asyncio
import logging
from typing import Iterable, List, Optional

from travis_connector.core.context import SyncContext
from travis_connector.core.exceptions import BatchFailure, ExhaustedRetries, MalformedResponse
from travis_connector.core.pagination import fetch_pages, plan_pages
from travis_connector.core.reconciler import SyncStrategy, merge, reconcile
from travis_connector.core.travis_client import TravisClient
from travis_connector.models.builds import BuildRecord, JobRecord, SyncResult

logger = logging.getLogger(__name__)

class BuildSync:
    """Runs one refresh of a repository's builds"""

    def __init__(self, context: SyncContext, client: Optional[TravisClient] = None):
        self.context = context
        self.client = client or TravisClient(context)

    async def sync(self, cursor: Optional[int] = 0) -> SyncResult:
        """Fetch builds newer than cursor, or the full window when cursor is 0.

        Any page that cannot be fetched fails the sync with BatchFailure; no
        partial result is returned.
        """
        cursor = int(cursor or 0)

        # The newest page tells us where the history ends
        try:
            first_page = await asyncio.to_thread(self.client.get_builds)
        except (ExhaustedRetries, MalformedResponse) as e:
            logger.error(f"First page failed for {self.context.repo_slug}: {e.message}")
            raise BatchFailure(e.message, 1) from e
        strategy = reconcile(first_page, cursor, self.context.items_per_page)
        logger.info(
            f"Syncing {self.context.repo_slug}: strategy={strategy.value} "
            f"cursor={cursor} last_build_number={first_page.last_build_number}"
        )

        pages = [first_page]
        if strategy is SyncStrategy.FULL_FETCH:
            page_requests = plan_pages(
                self.context.builds_path,
                first_page.last_build_number,
                self.context.limit,
                self.context.items_per_page,
                until_build=cursor,
            )
            pages.extend(await fetch_pages(self.client, page_requests))

        result = merge(pages, cursor)
        logger.info(f"Synced {len(result.builds)} builds and {len(result.commits)} commits for {self.context.repo_slug}")
        return result

    async def collect_jobs(self, builds: Iterable[BuildRecord]) -> List[JobRecord]:
        """Fetch every job referenced by the given builds, once per job id"""
        job_ids = []
        for build in builds:
            for job_id in build.job_ids:
                if job_id not in job_ids:
                    job_ids.append(job_id)

        if not job_ids:
            return []

        logger.info(f"Fetching {len(job_ids)} jobs for {self.context.repo_slug}")
        try:
            jobs = await asyncio.gather(
                *(asyncio.to_thread(self.client.get_job, job_id) for job_id in job_ids)
            )
        except (ExhaustedRetries, MalformedResponse) as e:
            raise BatchFailure(e.message, len(job_ids)) from e
        return list(jobs)
