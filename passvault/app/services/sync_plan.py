# passvault/app/services/sync_plan.py
"""
Classify records for a client-server reconciliation.

build_sync_plan compares the server's record states with the client's and
puts every record that needs work into exactly one bucket:

    download       server copy is newer (or unknown to the client)
    upload         record exists only on the client
    update         client copy is newer and must be pushed
    delete_client  server tombstoned the record, client still has it
    delete_server  client tombstoned the record, server still has it

Records that are in sync, or that were created and deleted on one side
before the other ever saw them, are left out. Nothing is merged: when both
sides changed, the side with the higher version wins the bucket and the
version check on write decides the rest.
"""
from typing import Dict, Iterable

from passvault.app.schemas.sync import RecordState, SyncPlan


def build_sync_plan(
    server_states: Iterable[RecordState],
    client_states: Iterable[RecordState],
) -> SyncPlan:
    plan = SyncPlan()

    server_index: Dict[str, RecordState] = {s.client_side_id: s for s in server_states}
    client_index: Dict[str, RecordState] = {c.client_side_id: c for c in client_states}

    for client_side_id, server in server_index.items():
        client = client_index.get(client_side_id)

        if client is None:
            if not server.deleted:
                plan.download.append(server)
            continue

        if server.version == client.version:
            if server.deleted and client.deleted:
                continue
            if server.deleted:
                plan.delete_client.append(server)
            elif client.deleted:
                plan.delete_server.append(client)
            elif server.hash != client.hash:
                # Edited locally without a version bump
                plan.update.append(client)
        elif server.version > client.version:
            if server.deleted:
                plan.delete_client.append(server)
            else:
                plan.download.append(server)
        else:
            if client.deleted:
                plan.delete_server.append(client)
            else:
                plan.update.append(client)

    for client_side_id, client in client_index.items():
        if client_side_id in server_index:
            continue
        if not client.deleted:
            plan.upload.append(client)

    return plan
