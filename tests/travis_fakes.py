import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import parse_qs, urlparse

import requests


ORG_ROOT = "https://api.travis-ci.org"
COM_ROOT = "https://api.travis-ci.com"
SLUG = "octo/widgets"


@dataclass
class FakeResponse:
    status_code: int = 200
    json_data: Optional[dict] = None

    def json(self) -> dict:
        return self.json_data or {}

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


def make_build(number: int) -> dict:
    return {
        "id": 1000 + number,
        "repository_id": 1,
        "commit_id": 5000 + number,
        "number": str(number),
        "state": "passed",
        "started_at": "2016-01-01T00:00:00Z",
        "finished_at": "2016-01-01T00:01:00Z",
        "duration": 60,
        "pull_request": False,
        "pull_request_title": None,
        "pull_request_number": None,
        "job_ids": [9000 + number],
    }


def make_commit(number: int) -> dict:
    return {
        "id": 5000 + number,
        "sha": f"{number:040d}",
        "branch": "master",
        "message": f"Commit {number}",
        "committed_at": "2015-12-31T23:59:00Z",
        "author_name": "Dev",
        "author_email": "dev@example.com",
        "committer_name": "Dev",
        "committer_email": "dev@example.com",
        "compare_url": f"https://github.com/{SLUG}/commit/{number}",
        "pull_request_number": None,
    }


@dataclass
class FakeTravisApi:
    """Serves builds numbered 1..total_builds newest first, like the v2 API."""

    total_builds: int
    per_page: int = 25
    failures: Dict[str, int] = field(default_factory=dict)
    urls: List[str] = field(default_factory=list)

    def __post_init__(self):
        self._lock = threading.Lock()

    def fail(self, url: str, times: int = 10_000):
        self.failures[url] = times

    def get(self, url: str, *_args, **_kwargs) -> FakeResponse:
        with self._lock:
            self.urls.append(url)
            remaining = self.failures.get(url, 0)
            if remaining:
                self.failures[url] = remaining - 1
                return FakeResponse(status_code=500)

        parsed = urlparse(url)
        if "/jobs/" in parsed.path:
            job_id = int(parsed.path.rsplit("/", 1)[-1])
            number = job_id - 9000
            return FakeResponse(json_data={"job": {
                "id": job_id,
                "build_id": 1000 + number,
                "repository_id": 1,
                "commit_id": 5000 + number,
                "log_id": 7000 + number,
                "number": f"{number}.1",
                "state": "passed",
                "started_at": "2016-01-01T00:00:00Z",
                "finished_at": "2016-01-01T00:01:00Z",
                "queue": "builds.docker",
                "allow_failure": False,
            }})

        after = parse_qs(parsed.query).get("after_number")
        top = int(after[0]) - 1 if after else self.total_builds
        numbers = range(top, max(top - self.per_page, 0), -1)
        return FakeResponse(json_data={
            "builds": [make_build(n) for n in numbers],
            "commits": [make_commit(n) for n in numbers],
        })

    @property
    def build_page_calls(self) -> List[str]:
        return [u for u in self.urls if "/builds" in u]


def builds_url(after_number: Optional[int] = None, root: str = ORG_ROOT) -> str:
    url = f"{root}/repos/{SLUG}/builds"
    return f"{url}?after_number={after_number}" if after_number else url


