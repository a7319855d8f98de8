"""
Bounded archive of forgotten nodes.

Entries are ordered by ``forgotten_at``. When an insert pushes the archive
past its capacity the oldest entry is purged permanently.
"""

import logging

from node_memory.errors import AlreadyArchivedError, NotArchivedError
from node_memory.models.archive import ForgottenNode

logger = logging.getLogger(__name__)


def _order_key(entry: ForgottenNode) -> tuple:
    return (entry.forgotten_at, entry.id)


class ForgettingArchive:
    """
    FIFO-by-forgetting-time archive with recall.

    Usage:
        archive = ForgettingArchive(capacity=100)
        purged = archive.add(ForgottenNode.from_node(node, reason="..."))
        entry = archive.pop(node.id)
    """

    def __init__(self, capacity: int = 100):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._entries: list[ForgottenNode] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    def _find(self, key: str) -> ForgottenNode | None:
        """Look up by node id first, then by archive entry id."""
        for entry in self._entries:
            if entry.node_id == key:
                return entry
        for entry in self._entries:
            if entry.id == key:
                return entry
        return None

    def get(self, key: str) -> ForgottenNode | None:
        return self._find(key)

    def contains_node(self, node_id: str) -> bool:
        return any(entry.node_id == node_id for entry in self._entries)

    def add(self, entry: ForgottenNode) -> list[ForgottenNode]:
        """
        Insert an entry.

        Raises:
            AlreadyArchivedError: If the node is already archived

        Returns:
            Entries purged to restore capacity (oldest first)
        """
        if self.contains_node(entry.node_id):
            raise AlreadyArchivedError(entry.node_id)

        self._entries.append(entry)
        self._entries.sort(key=_order_key)
        return self._purge_overflow()

    def pop(self, key: str) -> ForgottenNode:
        """
        Remove and return an entry by node id or entry id.

        Raises:
            NotArchivedError: If nothing matches
        """
        entry = self._find(key)
        if entry is None:
            raise NotArchivedError(key)
        self._entries.remove(entry)
        return entry

    def resize(self, capacity: int) -> list[ForgottenNode]:
        """Change capacity, purging the oldest entries that no longer fit."""
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        return self._purge_overflow()

    def _purge_overflow(self) -> list[ForgottenNode]:
        purged: list[ForgottenNode] = []
        while len(self._entries) > self._capacity:
            oldest = self._entries.pop(0)
            logger.info(f"Archive full, purged {oldest.node_id} forgotten at {oldest.forgotten_at}")
            purged.append(oldest)
        return purged

    def entries(self, newest_first: bool = False) -> list[ForgottenNode]:
        """All entries ordered by forgetting time."""
        if newest_first:
            return list(reversed(self._entries))
        return list(self._entries)

    def recent(self, limit: int = 5) -> list[ForgottenNode]:
        """Most recently forgotten entries, newest first."""
        return self.entries(newest_first=True)[:limit]

    def search(self, text: str) -> list[ForgottenNode]:
        """Entries whose content or reason contains ``text``, newest first."""
        if not text:
            return self.entries(newest_first=True)
        return [entry for entry in self.entries(newest_first=True) if entry.matches(text)]

    def load(self, entries: list[ForgottenNode]) -> list[ForgottenNode]:
        """Replace the contents, keeping the newest entries that fit."""
        seen: set[str] = set()
        unique: list[ForgottenNode] = []
        for entry in sorted(entries, key=_order_key):
            if entry.node_id in seen:
                logger.warning(f"Skipping duplicate archive entry for node {entry.node_id}")
                continue
            seen.add(entry.node_id)
            unique.append(entry)
        self._entries = unique
        return self._purge_overflow()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))
