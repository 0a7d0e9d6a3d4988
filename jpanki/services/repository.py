"""
Card repository - persistence and query layer for generated cards.

Two stores are kept side by side:
- ``out/data.json``: JSON array of full card records (the source of truth)
- ``out/anki.csv``: one row of Anki fields per card, ready for import
"""

import asyncio
import functools
import json
import logging
import math
import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from ..config import Config
from ..models import ANKI_FIELDS
from ..utils.helpers import remove_file, temp_path_for

logger = logging.getLogger(__name__)

SEARCH_FIELDS = (
    "polite_jp",
    "casual_jp",
    "translation_polite",
    "translation_casual",
    "source_input",
)


class CardRepository:
    """
    JSON + CSV backed card store.

    Writes are serialized per store path and land atomically (temp file,
    then os.replace), so concurrent saves never lose an append.
    """

    _locks: Dict[str, threading.Lock] = {}
    _locks_guard = threading.Lock()

    def __init__(self, json_path: Optional[str] = None, csv_path: Optional[str] = None):
        """
        Initialize repository.

        Args:
            json_path: Path to data.json (defaults to Config.DATA_JSON_FILE)
            csv_path: Path to anki.csv (defaults to Config.CSV_FILE)
        """
        self.json_path = Path(json_path or Config.DATA_JSON_FILE)
        self.csv_path = Path(csv_path or Config.CSV_FILE)

    @classmethod
    def _lock_for(cls, path: Path) -> threading.Lock:
        key = str(path.resolve())
        with cls._locks_guard:
            if key not in cls._locks:
                cls._locks[key] = threading.Lock()
            return cls._locks[key]

    # =========================================================================
    # WRITE
    # =========================================================================

    def save(self, record: Mapping[str, Any], anki_fields: Mapping[str, str]) -> None:
        """
        Append a card record to data.json and its Anki row to anki.csv.

        Both files are rendered to temp files first and only then renamed
        into place, under both store locks. If the CSV cannot be committed
        the previous data.json is restored, so a failed save leaves neither
        store changed.

        Args:
            record: Serialized card record (CardRecord.to_dict())
            anki_fields: The 12 Anki fields for the CSV row
        """
        with self._lock_for(self.json_path), self._lock_for(self.csv_path):
            previous = self._read_for_append()
            had_json = self.json_path.exists()

            json_temp = self._dump_json(previous + [dict(record)])
            try:
                csv_temp = self._dump_csv(anki_fields)
            except Exception:
                remove_file(json_temp)
                raise

            try:
                os.replace(json_temp, self.json_path)
                try:
                    os.replace(csv_temp, self.csv_path)
                except OSError:
                    self._restore_json(previous if had_json else None)
                    raise
            finally:
                remove_file(json_temp)
                remove_file(csv_temp)

        logger.debug("Saved card %s", record.get("id"))

    async def save_async(self, record: Mapping[str, Any], anki_fields: Mapping[str, str]) -> None:
        """Run save() in the default executor so the event loop is not blocked."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, functools.partial(self.save, record, anki_fields))

    def _read_for_append(self) -> List[Dict[str, Any]]:
        """Current store contents; an unparsable store is moved aside."""
        if not self.json_path.exists():
            return []

        try:
            with open(self.json_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if isinstance(data, list):
                return data
            reason = "top-level value is not an array"
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            reason = str(e)

        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup = self.json_path.with_name(f"{self.json_path.name}.corrupt-{stamp}")
        os.replace(self.json_path, backup)
        logger.warning(
            "Could not parse existing %s (%s), moved it to %s and starting fresh",
            self.json_path, reason, backup
        )
        return []

    def _dump_json(self, records: List[Dict[str, Any]]) -> str:
        """Write records to a temp file next to data.json and return its path."""
        self.json_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = temp_path_for(str(self.json_path))
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
        except Exception:
            remove_file(temp_path)
            raise
        return temp_path

    def _restore_json(self, records: Optional[List[Dict[str, Any]]]) -> None:
        """Put data.json back as it was before a failed save (None: it did not exist)."""
        if records is None:
            remove_file(str(self.json_path))
            return
        temp_path = self._dump_json(records)
        try:
            os.replace(temp_path, self.json_path)
        finally:
            remove_file(temp_path)
        logger.warning("Restored %s after a failed CSV write", self.json_path)

    def _dump_csv(self, anki_fields: Mapping[str, str]) -> str:
        """Write the CSV with the new row appended to a temp file and return its path."""
        row = pd.DataFrame([{name: anki_fields.get(name, "") for name in ANKI_FIELDS}])

        if self.csv_path.exists():
            existing = pd.read_csv(
                self.csv_path,
                dtype=str,
                keep_default_na=False,
                encoding='utf-8'
            )
            df = pd.concat([existing, row], ignore_index=True)
        else:
            df = row

        self.csv_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = temp_path_for(str(self.csv_path))
        try:
            df.to_csv(temp_path, index=False, encoding='utf-8')
        except Exception:
            remove_file(temp_path)
            raise
        return temp_path

    # =========================================================================
    # READ
    # =========================================================================

    def get_all(self) -> List[Dict[str, Any]]:
        """All card records; empty when the store is missing or unreadable."""
        if not self.json_path.exists():
            return []

        try:
            with open(self.json_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Error reading %s: %s", self.json_path, e)
            return []

        if not isinstance(data, list):
            logger.error("Error reading %s: expected a JSON array", self.json_path)
            return []
        return data

    def get_by_id(self, card_id: str) -> Optional[Dict[str, Any]]:
        """First record with the given id, or None."""
        for card in self.get_all():
            if card.get("id") == card_id:
                return card
        return None

    def count(self) -> int:
        return len(self.get_all())

    @staticmethod
    def _matches(card: Mapping[str, Any], query: str) -> bool:
        for field in SEARCH_FIELDS:
            value = card.get(field)
            if value and query in str(value).lower():
                return True
        return False

    def search(self, query: str) -> List[Dict[str, Any]]:
        """
        Case-insensitive substring search.

        Looks at polite_jp, casual_jp, translation_polite,
        translation_casual and source_input.
        """
        lowered = (query or "").lower()
        return [card for card in self.get_all() if self._matches(card, lowered)]

    def paginate(
        self,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Newest-first page of cards, optionally filtered.

        Args:
            page: 1-based page number
            limit: Cards per page
            search: Optional search query

        Returns:
            {"cards": [...], "pagination": {page, limit, total, totalPages, hasNext, hasPrev}}
        """
        page = max(1, int(page))
        limit = max(1, int(limit))

        cards = self.search(search) if search else self.get_all()
        # ISO 8601 UTC timestamps in one format sort chronologically as strings
        cards.sort(key=lambda c: str(c.get("timestamp") or ""), reverse=True)

        total = len(cards)
        total_pages = math.ceil(total / limit)
        start = (page - 1) * limit

        return {
            "cards": cards[start:start + limit],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": total_pages,
                "hasNext": page < total_pages,
                "hasPrev": page > 1,
            },
        }

    def get_stats(self) -> Dict[str, int]:
        """Store statistics for dashboard display."""
        cards = self.get_all()
        with_casual = sum(1 for card in cards if card.get("has_polite_and_casual"))
        return {
            "total": len(cards),
            "withCasual": with_casual,
            "withoutCasual": len(cards) - with_casual,
        }

    def read_csv(self) -> pd.DataFrame:
        """The Anki CSV as a DataFrame (empty with the 12 columns if missing)."""
        if not self.csv_path.exists():
            return pd.DataFrame(columns=list(ANKI_FIELDS))
        return pd.read_csv(self.csv_path, dtype=str, keep_default_na=False, encoding='utf-8')
