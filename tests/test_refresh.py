import json

import pytest

from tests.travis_fakes import SLUG, builds_url
from travis_connector import refresh


@pytest.fixture
def env(monkeypatch, tmp_path):
    state_file = tmp_path / "state.json"
    output = tmp_path / "rows.jsonl"
    monkeypatch.setattr(refresh, "TRAVIS_REPO_SLUG", SLUG)
    monkeypatch.setattr(refresh, "TRAVIS_IS_PRIVATE", False)
    monkeypatch.setattr(refresh, "TRAVIS_STATE_FILE", str(state_file))
    monkeypatch.setattr(refresh, "TRAVIS_OUTPUT", str(output))
    return state_file, output


def read_rows(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_state_round_trips_per_repository(tmp_path):
    path = str(tmp_path / "state.json")

    assert refresh.load_last_record(path, SLUG) == 0
    refresh.save_last_record(path, SLUG, 42)
    refresh.save_last_record(path, "octo/other", 7)

    assert refresh.load_last_record(path, SLUG) == 42
    assert refresh.load_last_record(path, "octo/other") == 7


def test_full_then_incremental_refresh(fake_api, env):
    state_file, output = env
    api = fake_api(40)

    assert refresh.main() == 0
    assert [r["number"] for r in read_rows(output)] == list(range(40, 0, -1))
    assert refresh.load_last_record(str(state_file), SLUG) == 40

    # Three new builds land upstream
    api.total_builds = 43
    output.unlink()

    assert refresh.main() == 0
    assert [r["number"] for r in read_rows(output)] == [43, 42, 41]
    assert refresh.load_last_record(str(state_file), SLUG) == 43


def test_failed_refresh_keeps_state(fake_api, env):
    state_file, output = env
    api = fake_api(100)
    api.fail(builds_url(76))

    assert refresh.main() == 1
    assert not output.exists()
    assert not state_file.exists()


def test_cli_rejects_non_numeric_limit(monkeypatch, env):
    monkeypatch.setattr(refresh, "TRAVIS_LIMIT", "lots")

    with pytest.raises(SystemExit) as excinfo:
        refresh.cli()

    assert excinfo.value.code == "TRAVIS_LIMIT must be a number of rows, got 'lots'"


def test_cli_rejects_corrupt_state_file(monkeypatch, fake_api, env):
    state_file, output = env
    monkeypatch.setattr(refresh, "TRAVIS_LIMIT", "")
    api = fake_api(10)
    state_file.write_text("{not json")

    with pytest.raises(SystemExit) as excinfo:
        refresh.cli()

    assert excinfo.value.code.startswith(f"Unreadable state file {state_file}")
    assert api.urls == []
    assert not output.exists()
