"""Host-facing connector shim.

The BI tool's connector runtime drives a fixed lifecycle: ``setup`` once per
phase, ``schema`` to learn the tables, ``get_data`` once per table, and
``teardown``. ``get_data`` reports back through two host callbacks:
``register_data`` receives the rows exactly once, and ``abort_with_error`` is
called before an empty ``register_data`` when the refresh fails.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import logging

from pydantic import BaseModel, field_validator

from travis_connector.core.config import settings
from travis_connector.core.context import SyncContext
from travis_connector.core.exceptions import ConnectorException, NotFoundError, ValidationException
from travis_connector.core.sync import BuildSync
from travis_connector.core.travis_client import TravisClient
from travis_connector.models.builds import SyncResult
from travis_connector.models.tables import TABLES, TableSchema

logger = logging.getLogger(__name__)

RegisterData = Callable[[List[Dict[str, Any]]], None]
AbortWithError = Callable[[str], None]

class Phase(str, Enum):
    """Phases the host initializes the connector in"""
    INTERACTIVE = "interactive"
    GATHER_DATA = "gatherData"
    AUTH = "auth"

class ConnectionData(BaseModel):
    """Connection details entered by the user"""
    RepoSlug: str
    IsPrivate: bool = False
    Limit: Optional[int] = None

    @field_validator("Limit", mode="before")
    @classmethod
    def _blank_limit(cls, value):
        if value in ("", 0, "0"):
            return None
        return value

def parse_last_record(last_record: Optional[Any]) -> int:
    """Build number the host last synced, 0 when absent"""
    if last_record in (None, ""):
        return 0
    try:
        return int(last_record)
    except (TypeError, ValueError):
        raise ValidationException(
            f"Last record must be a build number, got {last_record!r}",
            details={"last_record": str(last_record)},
        )

class TravisConnector:
    """Travis CI connector driven by the host lifecycle"""

    name = "Travis CI"
    auth_type = "custom"

    def __init__(
        self,
        connection_data: ConnectionData,
        password: Optional[str] = None,
        client: Optional[TravisClient] = None,
    ):
        self.connection_data = connection_data
        self.context = SyncContext(
            repo_slug=connection_data.RepoSlug,
            is_private=connection_data.IsPrivate,
            limit=connection_data.Limit or settings.DEFAULT_ROW_LIMIT,
            token=password,
        )
        self.build_sync = BuildSync(self.context, client)
        self._build_data: Optional[SyncResult] = None

    async def setup(self, phase: Phase) -> None:
        # Nothing to prepare server-side in any phase
        logger.debug(f"Connector setup for phase {Phase(phase).value}")

    async def teardown(self) -> None:
        self._build_data = None

    def schema(self) -> List[TableSchema]:
        return TABLES

    async def _builds(self, cursor: int = 0) -> SyncResult:
        if self._build_data is None:
            self._build_data = await self.build_sync.sync(cursor)
        return self._build_data

    async def fetch_rows(self, table: str, last_record: Optional[Any] = None) -> List[Dict[str, Any]]:
        """Rows for one table; raises on any fetch failure"""
        cursor = parse_last_record(last_record)
        if table == "builds":
            # Every builds request is a fresh refresh
            self._build_data = None
            result = await self._builds(cursor)
            return [build.to_row() for build in result.builds]

        if table == "commits":
            result = await self._builds(cursor)
            return [commit.to_row() for commit in result.commits]

        if table == "jobs":
            result = await self._builds(cursor)
            jobs = await self.build_sync.collect_jobs(result.builds)
            return [job.to_row() for job in jobs]

        raise NotFoundError("Table", table)

    async def get_data(
        self,
        table: str,
        register_data: RegisterData,
        abort_with_error: AbortWithError,
        last_record: Optional[Any] = None,
    ) -> None:
        """Fetch one table and report it to the host"""
        try:
            rows = await self.fetch_rows(table, last_record)
        except ConnectorException as e:
            logger.error(f"Unable to fetch {table} for {self.context.repo_slug}: {e.message}")
            abort_with_error(f"Unable to fetch data: {e.message}")
            register_data([])
            return

        register_data(rows)
