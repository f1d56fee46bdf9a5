"""Blocked domain checks."""

from unveil.rules.models import BlockedDomainTable, normalize_host
from unveil.rules.resolver import host_suffixes


class BlockList:
    """Immutable set of domains that must never be fetched."""

    def __init__(self, table: BlockedDomainTable) -> None:
        self._domains = frozenset(table.domains)

    def __len__(self) -> int:
        return len(self._domains)

    def is_blocked(self, host: str) -> bool:
        """Check a host against the list.

        A host is blocked when it equals a listed domain or is a subdomain
        of one.

        Args:
            host: Host name.

        Returns:
            True if the host is blocked.
        """
        normalized = normalize_host(host)
        if not normalized:
            return False
        return any(candidate in self._domains for candidate in host_suffixes(normalized))
