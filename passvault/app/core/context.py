# passvault/app/core/context.py
from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """
    Identity of the caller for one request.

    Built by the authenticator from a verified token and passed explicitly to
    the guard, the mutation engine and the sync engine.
    """
    user_id: int
