"""Anki deck builder - packages the card store into an .apkg file."""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import genanki

from ..config import Config
from ..models import ANKI_FIELDS
from ..services.repository import CardRepository
from ..templates import CardTemplates
from ..utils.helpers import get_file_size_mb

logger = logging.getLogger(__name__)

MEDIA_FIELDS = ("Photo", "AudioWord", "AudioSentence")


class AnkiDeckBuilder:
    """
    Build an Anki deck from the saved card records.

    Usage:
        builder = AnkiDeckBuilder()
        builder.build()
        builder.export()
    """

    def __init__(
        self,
        repository: Optional[CardRepository] = None,
        media_dir: Optional[str] = None,
        progress_callback: Optional[Callable[[Dict[str, Any]], None]] = None
    ) -> None:
        """
        Initialize deck builder.

        Args:
            repository: Card store to read from
            media_dir: Where the card media lives (defaults to Config.MEDIA_DIR)
            progress_callback: Optional callback for progress updates.
                              Payload schema: {"event": "log"|"progress", "message": str, "value": float}
        """
        self.repository = repository or CardRepository()
        self.media_dir = Path(media_dir or Config.MEDIA_DIR)
        self.progress_callback = progress_callback or self._default_callback

        self.model = self._create_model()
        self.deck = genanki.Deck(Config.DECK_ID, Config.DECK_NAME)
        self.media_files: List[str] = []
        self.notes_added = 0
        self.notes_skipped = 0

    @staticmethod
    def _default_callback(payload: Dict[str, Any]) -> None:
        """Default callback that forwards events to the log (for CLI use)."""
        if payload.get("event") == "log":
            logger.info(payload.get("message", ""))
        elif payload.get("event") == "progress":
            message = payload.get("message", "")
            if message:
                logger.info("[%.1f%%] %s", payload.get("value", 0), message)

    def _emit(self, event: str, message: str = "", value: float = 0.0) -> None:
        """
        Emit a progress event via the callback.

        Args:
            event: Event type ('log' or 'progress')
            message: Human-readable message
            value: Progress value (0-100 for progress events)
        """
        self.progress_callback({"event": event, "message": message, "value": value})

    def _create_model(self) -> genanki.Model:
        """Note model with one field per CSV column."""
        return genanki.Model(
            Config.MODEL_ID,
            'JP Polite & Casual',
            fields=[{'name': name} for name in ANKI_FIELDS],
            templates=CardTemplates.get_templates(),
            css=CardTemplates.get_css()
        )

    def _media_file(self, name: str) -> Optional[str]:
        """Full path of a media file if it exists on disk."""
        if not name:
            return None
        path = self.media_dir / name
        return str(path) if path.exists() else None

    def _note_fields(self, fields: Mapping[str, str]) -> List[str]:
        """Field values in model order, with media wrapped for Anki."""
        values = {name: str(fields.get(name) or "") for name in ANKI_FIELDS}

        photo = self._media_file(values["Photo"])
        values["Photo"] = f'<img src="{values["Photo"]}">' if photo else ""

        for name in ("AudioWord", "AudioSentence"):
            audio = self._media_file(values[name])
            values[name] = f"[sound:{values[name]}]" if audio else ""

        return [values[name] for name in ANKI_FIELDS]

    def add_card(self, card: Mapping[str, Any]) -> bool:
        """
        Add one saved card record to the deck.

        Returns:
            False if the record has no Anki fields and was skipped
        """
        fields = card.get("ankiFields")
        if not fields or not fields.get("Expression"):
            self.notes_skipped += 1
            return False

        tags = ["jpanki"]
        if card.get("tense"):
            tags.append(str(card["tense"]))

        note = genanki.Note(
            model=self.model,
            fields=self._note_fields(fields),
            tags=tags,
            guid=genanki.guid_for(card.get("id", ""), card.get("source_input", ""))
        )
        self.deck.add_note(note)

        for name in MEDIA_FIELDS:
            path = self._media_file(fields.get(name, ""))
            if path and path not in self.media_files:
                self.media_files.append(path)

        self.notes_added += 1
        return True

    def build(self) -> int:
        """
        Add every card in the store to the deck.

        Returns:
            Number of notes added
        """
        cards = self.repository.get_all()
        total = len(cards)
        self._emit("log", f"[*] Building deck from {total} cards")

        for i, card in enumerate(cards, 1):
            if not self.add_card(card):
                self._emit("log", f"[WARN] Card {card.get('id', i)} skipped: no Anki fields")
            self._emit("progress", str(card.get("polite_jp") or ""), i / total * 100)

        return self.notes_added

    def export(self, output_file: Optional[str] = None) -> str:
        """
        Export deck to APKG file.

        Args:
            output_file: Output filename (defaults to <OUTPUT_DIR>/jpanki.apkg)

        Returns:
            Path of the written package
        """
        if output_file is None:
            output_file = os.path.join(Config.OUTPUT_DIR, "jpanki.apkg")
        Path(output_file).parent.mkdir(parents=True, exist_ok=True)

        # Backup old file
        if os.path.exists(output_file):
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            backup_file = output_file.replace(".apkg", f"_{timestamp}.apkg")
            os.replace(output_file, backup_file)
            self._emit("log", f"[*] Backup created: {backup_file}")

        package = genanki.Package(self.deck)
        package.media_files = list(self.media_files)
        package.write_to_file(output_file)

        self._emit("log", f"[OK] Notes: {self.notes_added} (skipped {self.notes_skipped})")
        self._emit("log", f"[OK] Media files: {len(self.media_files)}")
        self._emit("log", f"[FILE] {get_file_size_mb(output_file):.1f} MB -> {output_file}")
        return output_file
