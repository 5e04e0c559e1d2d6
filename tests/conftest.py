import pytest

from tests.travis_fakes import SLUG, FakeTravisApi
from travis_connector.core.context import SyncContext
from travis_connector.core.travis_client import TravisClient


@pytest.fixture
def fake_api(monkeypatch):
    def _install(total_builds: int) -> FakeTravisApi:
        api = FakeTravisApi(total_builds=total_builds)
        monkeypatch.setattr("travis_connector.core.travis_client.requests.get", api.get)
        return api
    return _install


@pytest.fixture
def context():
    return SyncContext(repo_slug=SLUG)


@pytest.fixture
def client(context):
    return TravisClient(context)
