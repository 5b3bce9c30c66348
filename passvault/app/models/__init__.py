from passvault.app.models.user import User
from passvault.app.models.record import Record

__all__ = ["User", "Record"]
