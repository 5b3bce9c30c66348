# passvault/app/models/user.py
from sqlalchemy import BigInteger, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from passvault.app.db.base import Base

# SQLite only autoincrements "INTEGER PRIMARY KEY"
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


class User(Base):
    __tablename__ = "users"

    id = Column(ID_TYPE, primary_key=True, autoincrement=True)
    # Case-sensitive, unique
    login = Column(String(255), unique=True, index=True, nullable=False)

    # Only used to authenticate the login, never to decrypt anything
    password_hash = Column(String(255), nullable=False)

    # Salt for the client-side key derivation; handed back to the client
    encryption_salt = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
