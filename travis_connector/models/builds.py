from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from dateutil import parser

ROW_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

def _parse_ts(ts: Optional[str]) -> Optional[str]:
    """Normalise an upstream ISO timestamp into the extract's datetime format"""
    if not ts:
        return None
    try:
        return parser.isoparse(ts).strftime(ROW_TIMESTAMP_FORMAT)
    except (ValueError, OverflowError):
        return None

class BuildRecord(BaseModel):
    """One build as returned by the builds endpoint"""
    id: int
    repository_id: Optional[int] = None
    commit_id: Optional[int] = None
    number: int
    state: Optional[str] = None
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    duration: Optional[int] = None
    pull_request: Optional[bool] = False
    pull_request_title: Optional[str] = None
    pull_request_number: Optional[int] = None
    job_ids: List[int] = Field(default_factory=list)

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "repository_id": self.repository_id,
            "commit_id": self.commit_id,
            "number": self.number,
            "pull_request": self.pull_request,
            "pull_request_title": self.pull_request_title,
            "pull_request_number": self.pull_request_number,
            "state": self.state,
            "started_at": _parse_ts(self.started_at),
            "finished_at": _parse_ts(self.finished_at),
            "duration": self.duration,
        }

class CommitRecord(BaseModel):
    """Commit correlated to a build through commit_id"""
    id: int
    sha: Optional[str] = None
    branch: Optional[str] = None
    message: Optional[str] = None
    committed_at: Optional[str] = None
    author_name: Optional[str] = None
    author_email: Optional[str] = None
    committer_name: Optional[str] = None
    committer_email: Optional[str] = None
    compare_url: Optional[str] = None
    pull_request_number: Optional[int] = None

    def to_row(self) -> Dict[str, Any]:
        row = self.model_dump()
        row["committed_at"] = _parse_ts(self.committed_at)
        return row

class JobRecord(BaseModel):
    """Job belonging to a build"""
    id: int
    build_id: Optional[int] = None
    repository_id: Optional[int] = None
    commit_id: Optional[int] = None
    log_id: Optional[int] = None
    number: Optional[str] = None
    state: Optional[str] = None
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    queue: Optional[str] = None
    allow_failure: Optional[bool] = False

    def to_row(self) -> Dict[str, Any]:
        row = self.model_dump()
        row["started_at"] = _parse_ts(self.started_at)
        row["finished_at"] = _parse_ts(self.finished_at)
        return row

class PageRequest(BaseModel):
    """One page of builds older than after_number, or the newest page"""
    path: str
    after_number: Optional[int] = None

class BuildsPage(BaseModel):
    """Parsed body of one builds response"""
    builds: List[BuildRecord] = Field(default_factory=list)
    commits: List[CommitRecord] = Field(default_factory=list)

    @property
    def last_build_number(self) -> int:
        return self.builds[-1].number if self.builds else 0

class JobEnvelope(BaseModel):
    """Body of the single job endpoint"""
    job: JobRecord

class SyncResult(BaseModel):
    """Builds in descending number order plus their commits"""
    builds: List[BuildRecord] = Field(default_factory=list)
    commits: List[CommitRecord] = Field(default_factory=list)

    @property
    def high_water_mark(self) -> int:
        return self.builds[0].number if self.builds else 0
