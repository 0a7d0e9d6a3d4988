"""
Card pipeline - turns one Japanese input into a persisted flashcard.

Stages: validate -> start -> id -> llm -> image -> audio -> map -> save -> done
(or error). Every stage is reported to the optional progress callback and
mirrored to the log.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from ..models import CardRecord, Credentials, MediaPaths
from ..utils.ids import generate_card_id
from ..utils.paths import CASUAL, POLITE
from .ai_service import AIService
from .field_mapper import map_to_anki_fields
from .media_service import MediaService
from .repository import CardRepository

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]
CredentialsLike = Union[Credentials, Mapping[str, Any], None]


@dataclass
class BulkResult:
    """Outcome of a bulk run: one entry per processed or failed line."""

    total: int = 0
    results: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "total": self.total,
            "processed": self.processed,
            "failed": self.failed,
            "results": self.results,
            "errors": self.errors,
        }


def _as_credentials(credentials: CredentialsLike) -> Credentials:
    if isinstance(credentials, Credentials):
        return credentials
    return Credentials.from_dict(credentials)


class CardPipeline:
    """
    Orchestrates ID, LLM, media generation, field mapping and persistence.

    Usage:
        async with CardPipeline() as pipeline:
            record = await pipeline.process_input("ありがとう")
    """

    def __init__(
        self,
        ai_service: Optional[AIService] = None,
        media_service: Optional[MediaService] = None,
        repository: Optional[CardRepository] = None
    ):
        self.ai_service = ai_service or AIService()
        self.media_service = media_service or MediaService()
        self.repository = repository or CardRepository()

    async def close(self) -> None:
        """Release HTTP sessions held by the services."""
        await self.ai_service.close()
        await self.media_service.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @staticmethod
    def _emit(on_progress: Optional[ProgressCallback], stage: str, message: str) -> None:
        if stage == "error":
            logger.error("[%s] %s", stage, message)
        else:
            logger.info("[%s] %s", stage, message)
        if on_progress:
            on_progress(stage, message)

    async def process_input(
        self,
        raw: str,
        on_progress: Optional[ProgressCallback] = None,
        credentials: CredentialsLike = None
    ) -> Optional[CardRecord]:
        """
        Generate, persist and return one card.

        Media is written to per-run staging names and only renamed onto the
        card's final file names once the LLM call and every media stage
        succeeded. Files of a card already in the store are therefore never
        touched by a failed run, even when the new input maps to the same ID.

        Args:
            raw: Japanese word or sentence (surrounding whitespace is ignored)
            on_progress: Optional callback receiving (stage, message)
            credentials: Per-request credential overrides

        Returns:
            The saved CardRecord, or None for blank input

        Raises:
            CardGenerationError: Any stage failed. Staged media is removed
                and nothing is persisted.
        """
        text = (raw or "").strip()
        if not text:
            self._emit(on_progress, "validate", "Empty input skipped")
            return None

        creds = _as_credentials(credentials)
        token = uuid.uuid4().hex[:8]
        # final path -> staging path, in generation order
        staged: Dict[str, str] = {}
        committed: List[str] = []
        card_id = None
        self._emit(on_progress, "start", f"Processing: {text}")

        try:
            card_id = generate_card_id(text)
            self._emit(on_progress, "id", f"Generated ID: {card_id}")

            self._emit(on_progress, "llm", "Calling LLM...")
            data = await self.ai_service.generate_card_data(
                text,
                api_key=creds.openai_api_key,
                system_prompt=creds.system_prompt,
            )
            self._emit(on_progress, "llm", f"LLM returned: {data.polite_jp}")

            media_svc = self.media_service

            self._emit(on_progress, "image", "Generating polite image...")
            image_polite = media_svc.get_image_path(card_id, POLITE)
            staged[image_polite] = await media_svc.generate_image(
                data.img_prompt_polite, card_id, POLITE, creds, staging=token
            )

            image_casual = None
            if data.has_polite_and_casual and data.img_prompt_casual:
                self._emit(on_progress, "image", "Generating casual image...")
                image_casual = media_svc.get_image_path(card_id, CASUAL)
                staged[image_casual] = await media_svc.generate_image(
                    data.img_prompt_casual, card_id, CASUAL, creds, staging=token
                )

            self._emit(on_progress, "audio", "Generating polite audio...")
            audio_polite = media_svc.get_audio_path(card_id, POLITE)
            staged[audio_polite] = await media_svc.generate_audio(
                data.polite_jp, card_id, POLITE, creds, staging=token
            )

            audio_casual = None
            if data.has_polite_and_casual and data.casual_jp:
                self._emit(on_progress, "audio", "Generating casual audio...")
                audio_casual = media_svc.get_audio_path(card_id, CASUAL)
                staged[audio_casual] = await media_svc.generate_audio(
                    data.casual_jp, card_id, CASUAL, creds, staging=token
                )

            media = MediaPaths(
                image_polite=image_polite,
                audio_polite=audio_polite,
                image_casual=image_casual,
                audio_casual=audio_casual,
            )

            self._emit(on_progress, "map", "Mapping Anki fields...")
            anki_fields = map_to_anki_fields(data.to_dict(), media.to_dict())

            record = CardRecord(
                id=card_id,
                source_input=text,
                data=data,
                media=media,
                anki_fields=anki_fields,
            )

            for final_path, staged_path in list(staged.items()):
                media_svc.commit_file(staged_path, final_path)
                del staged[final_path]
                committed.append(final_path)

            await self.repository.save_async(record.to_dict(), anki_fields)
            self._emit(on_progress, "save", f"Saved data for {card_id}")

        except Exception as e:
            self._emit(on_progress, "error", f"Error: {e}")
            await self._rollback(card_id, staged.values(), committed)
            raise

        self._emit(on_progress, "done", f"Card {card_id} complete")
        return record

    async def _rollback(
        self,
        card_id: Optional[str],
        staged: Iterable[str],
        committed: List[str]
    ) -> None:
        """
        Undo the media side effects of a failed run.

        Staged files always go. Committed files are only removed when no
        stored record owns that ID; otherwise they now hold the stored
        card's media and must stay.
        """
        self.media_service.remove_files(list(staged))
        if not committed:
            return

        loop = asyncio.get_running_loop()
        owner = await loop.run_in_executor(None, self.repository.get_by_id, card_id)
        if owner is None:
            self.media_service.remove_files(committed)
        else:
            logger.warning("Kept media of stored card %s after failed save", card_id)

    async def process_bulk(
        self,
        lines: Iterable[str],
        credentials: CredentialsLike = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> BulkResult:
        """
        Process inputs one after another, collecting per-line failures.

        Args:
            lines: Raw input lines; blank lines are skipped
            credentials: Per-request credential overrides shared by all lines
            on_progress: Optional callback receiving (stage, message)

        Returns:
            BulkResult with a result entry per success and an error entry per failure
        """
        inputs = [line.strip() for line in lines if line and line.strip()]
        creds = _as_credentials(credentials)
        result = BulkResult(total=len(inputs))

        for i, line in enumerate(inputs, 1):
            logger.info("Bulk item %d/%d: %s", i, len(inputs), line)
            try:
                record = await self.process_input(line, on_progress=on_progress, credentials=creds)
            except Exception as e:
                logger.warning("Bulk item failed (%s): %s", line, e)
                result.errors.append({"input": line, "error": str(e)})
                continue
            if record is not None:
                result.results.append({"input": line, "result": record.to_dict()})

        logger.info(
            "Bulk run finished: %d processed, %d failed of %d",
            result.processed, result.failed, result.total
        )
        return result
