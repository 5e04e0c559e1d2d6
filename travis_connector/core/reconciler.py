from enum import Enum
from typing import Iterable, List

from travis_connector.models.builds import BuildsPage, CommitRecord, SyncResult

class SyncStrategy(str, Enum):
    """How a refresh completes once the first page is known"""
    FULL_FETCH = "full_fetch"
    PARTIAL_SUFFIX = "partial_suffix"
    ALREADY_COMPLETE = "already_complete"

def reconcile(first_page: BuildsPage, cursor: int, items_per_page: int) -> SyncStrategy:
    """Pick the strategy for a refresh from the first page and the stored cursor"""
    last_build_number = first_page.last_build_number
    has_more = last_build_number > 1
    is_refresh_and_still_has_more = last_build_number > cursor
    until_build_is_in_this_payload = last_build_number <= cursor <= last_build_number + items_per_page - 1

    # Most common: older history beyond this page that has not been synced yet
    if has_more and is_refresh_and_still_has_more:
        return SyncStrategy.FULL_FETCH

    # The stored cursor falls inside the first page; keep only newer builds
    if cursor and until_build_is_in_this_payload:
        return SyncStrategy.PARTIAL_SUFFIX

    return SyncStrategy.ALREADY_COMPLETE

def merge(pages: Iterable[BuildsPage], cursor: int = 0) -> SyncResult:
    """Merge pages into one result ordered by descending build number.

    Builds at or below the cursor are dropped, and each build number and
    commit id is kept once.
    """
    builds_by_number = {}
    commits_by_id = {}
    for page in pages:
        for build in page.builds:
            if cursor and build.number <= cursor:
                continue
            builds_by_number.setdefault(build.number, build)
        for commit in page.commits:
            commits_by_id.setdefault(commit.id, commit)

    builds = sorted(builds_by_number.values(), key=lambda b: b.number, reverse=True)

    # Commits follow their builds in the same order
    commits: List[CommitRecord] = []
    seen = set()
    for build in builds:
        commit = commits_by_id.get(build.commit_id)
        if commit is not None and commit.id not in seen:
            seen.add(commit.id)
            commits.append(commit)

    if not cursor:
        # Commits nobody references are still part of a full sync
        commits.extend(c for c in commits_by_id.values() if c.id not in seen)

    return SyncResult(builds=builds, commits=commits)
