"""InscriptionStore protocol - persists completed inscriptions."""

from __future__ import annotations

from typing import Protocol

from inscribememaybe.models.records import InscriptionEvent, InscriptionRecord


class InscriptionStore(Protocol):
    """Keeps a record of every confirmed inscription transaction."""

    # ── Lifecycle ──────────────────────────────────────────

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        ...

    async def close(self) -> None:
        """Close the database connection."""
        ...

    # ── Inscriptions ───────────────────────────────────────

    async def insert_one(self, event: InscriptionEvent) -> int:
        """Store a confirmed inscription. Returns the row id."""
        ...

    async def get_inscriptions(
        self,
        sender: str | None = None,
        chain_id: int | None = None,
        limit: int | None = None,
    ) -> list[InscriptionRecord]:
        ...

    async def count(self, sender: str | None = None, chain_id: int | None = None) -> int:
        ...
