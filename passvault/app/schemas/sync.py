# passvault/app/schemas/sync.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class RecordState(BaseModel):
    """What a client needs to decide whether a record changed. No payload."""
    client_side_id: str
    hash: str
    version: int
    deleted: bool = False
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SyncRequest(BaseModel):
    user_id: Optional[int] = None
    client_side_ids: List[str] = Field(default_factory=list)
    length: Optional[int] = None


class SyncResponse(BaseModel):
    states: List[RecordState]
    length: int


class SyncPlanRequest(BaseModel):
    user_id: Optional[int] = None
    # The client's local view; may be empty on a fresh device
    states: List[RecordState] = Field(default_factory=list)


class SyncPlan(BaseModel):
    download: List[RecordState] = Field(default_factory=list)
    upload: List[RecordState] = Field(default_factory=list)
    update: List[RecordState] = Field(default_factory=list)
    delete_client: List[RecordState] = Field(default_factory=list)
    delete_server: List[RecordState] = Field(default_factory=list)
