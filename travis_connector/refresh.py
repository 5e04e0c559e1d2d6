import asyncio
import json
import logging
import os
import sys

from travis_connector.core.connector import ConnectionData, TravisConnector

TRAVIS_REPO_SLUG = os.getenv("TRAVIS_REPO_SLUG")
TRAVIS_TOKEN = os.getenv("TRAVIS_TOKEN")
TRAVIS_IS_PRIVATE = os.getenv("TRAVIS_IS_PRIVATE", "false").lower() == "true"
TRAVIS_LIMIT = os.getenv("TRAVIS_LIMIT", "")
TRAVIS_STATE_FILE = os.getenv("TRAVIS_STATE_FILE", ".travis_connector_state.json")
TRAVIS_OUTPUT = os.getenv("TRAVIS_OUTPUT", "-")

logger = logging.getLogger(__name__)


def load_last_record(path: str, repo_slug: str) -> int:
    try:
        with open(path) as f:
            state = json.load(f)
    except FileNotFoundError:
        return 0
    return int(state.get(repo_slug, {}).get("last_build_number", 0))


def save_last_record(path: str, repo_slug: str, last_build_number: int):
    state = {}
    if os.path.exists(path):
        with open(path) as f:
            state = json.load(f)
    state[repo_slug] = {"last_build_number": last_build_number}
    with open(path, "w") as f:
        json.dump(state, f, indent=2)


def write_rows(rows, output: str):
    out = sys.stdout if output == "-" else open(output, "a")
    try:
        for row in rows:
            out.write(json.dumps(row) + "\n")
    finally:
        if out is not sys.stdout:
            out.close()


async def refresh(connector: TravisConnector, last_record: int):
    """Run one builds refresh; returns (rows, error)"""
    registered = []
    errors = []
    await connector.get_data("builds", registered.append, errors.append, last_record=last_record)
    rows = registered[0] if registered else []
    return rows, (errors[0] if errors else None)


def main() -> int:
    connector = TravisConnector(
        ConnectionData(RepoSlug=TRAVIS_REPO_SLUG, IsPrivate=TRAVIS_IS_PRIVATE, Limit=TRAVIS_LIMIT),
        password=TRAVIS_TOKEN,
    )
    last_record = load_last_record(TRAVIS_STATE_FILE, TRAVIS_REPO_SLUG)
    print(f"Refreshing {TRAVIS_REPO_SLUG} from build #{last_record}" if last_record else f"Full refresh of {TRAVIS_REPO_SLUG}", file=sys.stderr)

    rows, error = asyncio.run(refresh(connector, last_record))
    if error:
        print(error, file=sys.stderr)
        return 1

    write_rows(rows, TRAVIS_OUTPUT)

    # Rows are newest first, so the first one carries the new high-water mark
    if rows:
        save_last_record(TRAVIS_STATE_FILE, TRAVIS_REPO_SLUG, rows[0]["number"])
    print(f"Fetched {len(rows)} new builds", file=sys.stderr)
    return 0


def cli():
    logging.basicConfig(level=logging.INFO)
    # basic validation
    for var in ["TRAVIS_REPO_SLUG"]:
        if not globals().get(var):
            raise SystemExit(f"Missing required env var: {var}")
    if TRAVIS_IS_PRIVATE and not TRAVIS_TOKEN:
        raise SystemExit("Missing required env var: TRAVIS_TOKEN")
    if TRAVIS_LIMIT and not TRAVIS_LIMIT.isdigit():
        raise SystemExit(f"TRAVIS_LIMIT must be a number of rows, got {TRAVIS_LIMIT!r}")
    try:
        load_last_record(TRAVIS_STATE_FILE, TRAVIS_REPO_SLUG)
    except (ValueError, TypeError, AttributeError) as e:
        raise SystemExit(f"Unreadable state file {TRAVIS_STATE_FILE}: {e}")
    raise SystemExit(main())


if __name__ == "__main__":
    cli()
