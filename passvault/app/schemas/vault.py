# passvault/app/schemas/vault.py
"""
Request and response bodies of the /data endpoints.

Field declaration order of UploadItem and UpdateItem is part of the wire
contract: the integrity hash is computed over these models re-serialized in
that order (see passvault/app/security/integrity.py).
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class UploadItem(BaseModel):
    client_side_id: str = ""
    payload: str = ""
    hash: str = ""


class UploadRequest(BaseModel):
    user_id: Optional[int] = None
    payload_list: List[UploadItem] = Field(default_factory=list)
    length: Optional[int] = None
    hash: str = ""


class UpdateItem(BaseModel):
    client_side_id: str = ""
    payload: str = ""
    hash: str = ""
    # None means the client did not send it; rejected by the engine
    version: Optional[int] = None


class UpdateRequest(BaseModel):
    user_id: Optional[int] = None
    private_data_updates: List[UpdateItem] = Field(default_factory=list)
    length: Optional[int] = None
    hash: str = ""


class DeleteEntry(BaseModel):
    client_side_id: str = ""
    version: Optional[int] = None


class DeleteRequest(BaseModel):
    user_id: Optional[int] = None
    delete_entries: List[DeleteEntry] = Field(default_factory=list)
    length: Optional[int] = None


class DownloadRequest(BaseModel):
    user_id: Optional[int] = None
    client_side_ids: List[str] = Field(default_factory=list)
    length: Optional[int] = None


class RecordResponse(BaseModel):
    server_id: int
    user_id: int
    client_side_id: str
    payload: str
    hash: str
    version: int
    deleted: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
