"""Persistence for confirmed inscriptions."""

from inscribememaybe.storage.sqlite import SQLiteInscriptionStore

__all__ = ["SQLiteInscriptionStore"]
