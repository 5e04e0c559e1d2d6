from pydantic import BaseModel
from typing import List, Optional, Dict, Any

class ColumnHeader(BaseModel):
    """Column declaration handed to the host"""
    name: str
    type: str  # bool, date, datetime, float, int, string
    incrementalRefresh: Optional[bool] = None

class TableSchema(BaseModel):
    """Columns of one connector table"""
    id: str
    columns: List[ColumnHeader]

class TableRows(BaseModel):
    """Rows returned for one table"""
    table: str
    rows: List[Dict[str, Any]]
    count: int
    timestamp: str

def _columns(*pairs) -> List[ColumnHeader]:
    return [ColumnHeader(name=name, type=col_type) for name, col_type in pairs]

BUILD_COLUMNS = _columns(
    ("id", "int"),
    ("repository_id", "int"),
    ("commit_id", "int"),
    ("number", "int"),
    ("pull_request", "bool"),
    ("pull_request_title", "string"),
    ("pull_request_number", "int"),
    ("state", "string"),
    ("started_at", "datetime"),
    ("finished_at", "datetime"),
    ("duration", "int"),
)

# Incremental refreshes hand the last synced build number back as lastRecord
BUILD_COLUMNS[3].incrementalRefresh = True

COMMIT_COLUMNS = _columns(
    ("id", "int"),
    ("sha", "string"),
    ("branch", "string"),
    ("message", "string"),
    ("committed_at", "datetime"),
    ("author_name", "string"),
    ("author_email", "string"),
    ("committer_name", "string"),
    ("committer_email", "string"),
    ("compare_url", "string"),
    ("pull_request_number", "int"),
)

JOB_COLUMNS = _columns(
    ("id", "int"),
    ("build_id", "int"),
    ("repository_id", "int"),
    ("commit_id", "int"),
    ("log_id", "int"),
    ("number", "string"),
    ("state", "string"),
    ("started_at", "datetime"),
    ("finished_at", "datetime"),
    ("queue", "string"),
    ("allow_failure", "bool"),
)

TABLES = [
    TableSchema(id="builds", columns=BUILD_COLUMNS),
    TableSchema(id="commits", columns=COMMIT_COLUMNS),
    TableSchema(id="jobs", columns=JOB_COLUMNS),
]
