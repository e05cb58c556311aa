"""SQLite implementation of the InscriptionStore protocol."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from inscribememaybe.models.records import InscriptionEvent, InscriptionRecord

log = logging.getLogger(__name__)

SCHEMA = """
-- Confirmed inscription transactions
CREATE TABLE IF NOT EXISTS inscriptions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    -- sender address of the transaction
    sender TEXT NOT NULL,
    -- chain id of the transaction
    chain_id INTEGER NOT NULL,
    nonce INTEGER NOT NULL,
    -- hash of the transaction
    tx_hash TEXT NOT NULL,
    -- inscription call data
    calldata BLOB NOT NULL,
    block_number INTEGER,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_inscriptions_sender ON inscriptions(sender, chain_id);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteInscriptionStore:
    """SQLite-backed implementation of the InscriptionStore protocol."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(SCHEMA)
        await self._db.commit()
        log.info("connected to database %s", self._db_path)

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Store not initialized. Call initialize() first."
        return self._db

    # ── Inscriptions ───────────────────────────────────────

    async def insert_one(self, event: InscriptionEvent) -> int:
        cur = await self.db.execute(
            "INSERT INTO inscriptions"
            " (sender, chain_id, nonce, tx_hash, calldata, block_number, created_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                event.sender, event.chain_id, event.nonce, event.tx_hash,
                event.calldata, event.receipt.block_number, _now(),
            ),
        )
        await self.db.commit()
        row_id = cur.lastrowid
        await cur.close()
        log.debug("inserted inscription nonce=%d tx=%s id=%s", event.nonce, event.tx_hash, row_id)
        return row_id or 0

    async def get_inscriptions(
        self,
        sender: str | None = None,
        chain_id: int | None = None,
        limit: int | None = None,
    ) -> list[InscriptionRecord]:
        where, params = _filters(sender, chain_id)
        sql = f"SELECT * FROM inscriptions{where} ORDER BY id DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        async with self.db.execute(sql, params) as cur:
            return [_row_to_inscription(row) async for row in cur]

    async def count(self, sender: str | None = None, chain_id: int | None = None) -> int:
        where, params = _filters(sender, chain_id)
        async with self.db.execute(
            f"SELECT COUNT(*) as c FROM inscriptions{where}", params
        ) as cur:
            row = await cur.fetchone()
            return row["c"] if row else 0


def _filters(sender: str | None, chain_id: int | None) -> tuple[str, list]:
    clauses = []
    params: list = []
    if sender is not None:
        # Addresses may be stored checksummed; compare case-insensitively.
        clauses.append("lower(sender)=lower(?)")
        params.append(sender)
    if chain_id is not None:
        clauses.append("chain_id=?")
        params.append(chain_id)
    where = " WHERE " + " AND ".join(clauses) if clauses else ""
    return where, params


def _row_to_inscription(row: aiosqlite.Row) -> InscriptionRecord:
    return InscriptionRecord(
        id=row["id"],
        sender=row["sender"],
        chain_id=row["chain_id"],
        nonce=row["nonce"],
        tx_hash=row["tx_hash"],
        calldata=bytes(row["calldata"]),
        block_number=row["block_number"],
        created_at=row["created_at"],
    )
