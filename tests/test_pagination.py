import asyncio

import pytest

from tests.travis_fakes import builds_url
from travis_connector.core.exceptions import BatchFailure
from travis_connector.core.pagination import fetch_pages, max_pages_for, plan_pages
from travis_connector.models.builds import PageRequest

PATH = "repos/octo/widgets/builds"


def test_first_page_counts_against_row_budget():
    assert max_pages_for(2000, 2500, 25) == 99
    assert max_pages_for(2000, 25, 25) == 0
    assert max_pages_for(2000, 60, 25) == 1


def test_watermark_bound_wins_when_tighter():
    # Builds 1951..1999 sit between the watermark and the cursor: two pages
    assert max_pages_for(2000, 2500, 25, until_build=1950) == 2
    assert max_pages_for(2000, 2500, 25, until_build=1975) == 1
    assert max_pages_for(2000, 2500, 25, until_build=1999) == 0


def test_partial_page_gap_is_still_fetched():
    assert max_pages_for(100, 2500, 25, until_build=90) == 1
    assert [r.after_number for r in plan_pages(PATH, 100, 2500, 25, until_build=90)] == [100]


def test_row_budget_wins_when_tighter():
    assert max_pages_for(2000, 100, 25, until_build=10) == 3


def test_plan_walks_backwards_from_start_cursor():
    requests = plan_pages(PATH, 2000, 2500, 25)

    cursors = [r.after_number for r in requests]
    assert cursors[:3] == [2000, 1975, 1950]
    # 99 pages are allowed but history runs out first
    assert len(cursors) == 80
    assert cursors[-1] == 25
    assert all(r.path == PATH for r in requests)


def test_plan_respects_page_budget():
    requests = plan_pages(PATH, 5000, 100, 25)
    assert [r.after_number for r in requests] == [5000, 4975, 4950]


def test_plan_stops_at_watermark():
    requests = plan_pages(PATH, 76, 2500, 25, until_build=30)
    assert [r.after_number for r in requests] == [76, 51]


def test_plan_is_empty_at_start_of_history():
    assert plan_pages(PATH, 1, 2500, 25) == []


def test_fetch_pages_keeps_request_order(fake_api, client):
    api = fake_api(100)
    requests = [PageRequest(path=PATH, after_number=n) for n in (76, 51, 26)]

    pages = asyncio.run(fetch_pages(client, requests))

    assert [p.builds[0].number for p in pages] == [75, 50, 25]
    assert len(api.build_page_calls) == 3


def test_fetch_pages_with_nothing_planned(client):
    assert asyncio.run(fetch_pages(client, [])) == []


def test_fetch_pages_fails_whole_batch(fake_api, client):
    api = fake_api(100)
    api.fail(builds_url(51))
    requests = [PageRequest(path=PATH, after_number=n) for n in (76, 51, 26)]

    with pytest.raises(BatchFailure) as exc_info:
        asyncio.run(fetch_pages(client, requests))

    assert "after_number=51" in exc_info.value.reason
    assert exc_info.value.details["pages_planned"] == 3
