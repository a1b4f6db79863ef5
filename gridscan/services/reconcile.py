"""Merging freshly probed hosts with previously persisted records."""

from collections.abc import Iterable, Mapping

from ..models.host import Host


def index_by_address(hosts: Iterable[Host]) -> dict[str, Host]:
    """Key hosts by address; later entries win."""
    return {host.ip_address: host for host in hosts}


def merge(fresh: Host, persisted: Mapping[str, Host] | Iterable[Host]) -> Host:
    """Reconcile a fresh probe result against the persisted record for its address.

    User labels and identity come from the persisted record; scan data comes
    from the fresh host. Neither input is modified.
    """
    records = persisted if isinstance(persisted, Mapping) else index_by_address(persisted)
    previous = records.get(fresh.ip_address)

    if previous is None:
        return fresh.model_copy(update={"is_new": True, "has_changed": False})

    return fresh.model_copy(
        update={
            "id": previous.id,
            "display_name": previous.display_name,
            "notes": previous.notes,
            "is_new": False,
            "has_changed": set(previous.open_ports) != set(fresh.open_ports),
        }
    )
