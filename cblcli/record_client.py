"""Lookup of Cobbler system records by id or FQDN."""

from typing import Any, Optional

from .query_executor import QueryExecutor
from .tracked_record import TrackedRecord

# Shapes Cobbler returns for "no match".
ABSENT_SENTINELS = ("", "~")


def is_absent(value: Any) -> bool:
    """Return True if a remote response means "nothing found"."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in ABSENT_SENTINELS
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


class RecordClient:
    """Resolve system identifiers into TrackedRecord instances."""

    def __init__(self, executor: QueryExecutor) -> None:
        """Initialize the client with the executor used for remote calls."""
        self.executor = executor

    def resolve(self, identifier: str) -> Optional[TrackedRecord]:
        """Fetch a system by FQDN (if ``identifier`` contains a dot) or by id.

        Returns:
            The record, or None when no system matches or the server did not answer
        """
        if "." in identifier:
            return self.resolve_by_name(identifier)
        return self.resolve_by_key(identifier)

    def resolve_by_name(self, fqdn: str) -> Optional[TrackedRecord]:
        """Find a system by hostname and fetch the first match."""
        candidates = self.executor.invoke("find_system", {"hostname": fqdn})
        if is_absent(candidates):
            return None
        if isinstance(candidates, (list, tuple)):
            key = candidates[0]
        else:
            key = candidates
        if is_absent(key):
            return None
        return self.resolve_by_key(str(key))

    def resolve_by_key(self, key: str) -> Optional[TrackedRecord]:
        """Fetch a system by its id; non-mapping responses count as not found."""
        result = self.executor.invoke("get_system", key)
        if not isinstance(result, dict):
            return None
        return TrackedRecord.from_mapping(result)
