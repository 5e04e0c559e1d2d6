from fastapi import APIRouter, Header, HTTPException, Path, Query
from typing import List, Optional
from datetime import datetime, timezone
import logging

from travis_connector.core.connector import ConnectionData, TravisConnector
from travis_connector.core.exceptions import ConnectorException
from travis_connector.models.tables import TABLES, TableRows, TableSchema

logger = logging.getLogger(__name__)
router = APIRouter()

def _credential(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from 'token <credential>' or 'Bearer <credential>'"""
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() in ("token", "bearer") and value:
        return value.strip()
    return authorization.strip()

@router.get("/schema", response_model=List[TableSchema], response_model_exclude_none=True)
async def get_schema():
    """Get column headers for every table the connector provides"""
    return TABLES

@router.get("/tables/{table}", response_model=TableRows)
async def get_table(
    table: str = Path(..., description="Table id: builds, commits or jobs"),
    repo_slug: str = Query(..., description="Repository slug, owner/repo"),
    is_private: bool = Query(default=False, description="Use the private repository API"),
    limit: Optional[int] = Query(default=None, ge=1, description="Row budget for the refresh"),
    last_record: Optional[int] = Query(default=None, ge=0, description="Last synced build number"),
    authorization: Optional[str] = Header(default=None)
):
    """Get rows for one table, incrementally when last_record is given"""
    connector = TravisConnector(
        ConnectionData(RepoSlug=repo_slug, IsPrivate=is_private, Limit=limit),
        password=_credential(authorization),
    )
    try:
        rows = await connector.fetch_rows(table, last_record)
    except ConnectorException:
        raise
    except Exception as e:
        logger.error(f"Error getting {table} for {repo_slug}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch {table}: {str(e)}")

    return TableRows(
        table=table,
        rows=rows,
        count=len(rows),
        timestamp=datetime.now(timezone.utc).isoformat()
    )
