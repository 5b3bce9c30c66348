# passvault/app/models/record.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from passvault.app.db.base import Base
from passvault.app.models.user import ID_TYPE


class Record(Base):
    """
    One encrypted vault item.

    The server never interprets `payload` or `hash`; it only stores them and
    enforces ownership and the version protocol.
    """
    __tablename__ = "records"
    __table_args__ = (
        UniqueConstraint("user_id", "client_side_id", name="uq_records_user_client_side_id"),
    )

    server_id = Column(ID_TYPE, primary_key=True, autoincrement=True)
    user_id = Column(ID_TYPE, ForeignKey("users.id"), nullable=False, index=True)

    # Sync key chosen by the client
    client_side_id = Column(String(255), nullable=False)

    # --- SECRET DATA (opaque ciphertext) ---
    payload = Column(Text, nullable=False)
    hash = Column(String(255), nullable=False)

    version = Column(Integer, nullable=False, default=0)
    deleted = Column(Boolean, nullable=False, default=False)

    # Set by the engine (UTC) so updated_at moves with every accepted write
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
