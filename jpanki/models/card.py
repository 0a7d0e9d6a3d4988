"""Data models for jpanki."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ..config import Config


class Tense(Enum):
    """Grammatical tense reported by the LLM."""
    PAST = "past"
    PRESENT = "present"
    FUTURE = "future"


# Keys the LLM must return for every input
REQUIRED_LLM_FIELDS = (
    "source_input",
    "tense",
    "has_polite_and_casual",
    "polite_jp",
    "polite_kana",
    "polite_reading",
    "translation_polite",
    "casual_jp",
    "casual_kana",
    "translation_casual",
    "notes",
    "img_prompt_polite",
    "img_prompt_casual",
)

CASUAL_FIELDS = ("casual_jp", "casual_kana", "translation_casual", "img_prompt_casual")

# Anki note fields, in CSV column order
ANKI_FIELDS = (
    "Expression",
    "ExpressionReading",
    "ExpressionKana",
    "PitchAccent",
    "Meaning",
    "SentenceJP",
    "SentenceJPKana",
    "SentenceEN",
    "Photo",
    "Notes",
    "AudioWord",
    "AudioSentence",
)


@dataclass
class CardData:
    """Structured output of the LLM for one Japanese input."""

    source_input: str
    tense: Tense
    has_polite_and_casual: bool
    polite_jp: str
    polite_kana: str = ""
    polite_reading: str = ""
    translation_polite: str = ""
    casual_jp: Optional[str] = None
    casual_kana: Optional[str] = None
    translation_casual: Optional[str] = None
    notes: str = ""
    img_prompt_polite: str = ""
    img_prompt_casual: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CardData":
        """Build from a validated LLM payload. Unknown keys are ignored."""
        return cls(
            source_input=str(data.get("source_input") or ""),
            tense=Tense(data["tense"]),
            has_polite_and_casual=bool(data.get("has_polite_and_casual")),
            polite_jp=data.get("polite_jp") or "",
            polite_kana=data.get("polite_kana") or "",
            polite_reading=data.get("polite_reading") or "",
            translation_polite=data.get("translation_polite") or "",
            casual_jp=data.get("casual_jp"),
            casual_kana=data.get("casual_kana"),
            translation_casual=data.get("translation_casual"),
            notes=data.get("notes") or "",
            img_prompt_polite=data.get("img_prompt_polite") or "",
            img_prompt_casual=data.get("img_prompt_casual"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize; casual fields are nulled when the phrase has no casual form."""
        data = {
            "source_input": self.source_input,
            "tense": self.tense.value,
            "has_polite_and_casual": self.has_polite_and_casual,
            "polite_jp": self.polite_jp,
            "polite_kana": self.polite_kana,
            "polite_reading": self.polite_reading,
            "translation_polite": self.translation_polite,
            "casual_jp": self.casual_jp,
            "casual_kana": self.casual_kana,
            "translation_casual": self.translation_casual,
            "notes": self.notes,
            "img_prompt_polite": self.img_prompt_polite,
            "img_prompt_casual": self.img_prompt_casual,
        }
        if not self.has_polite_and_casual:
            for key in CASUAL_FIELDS:
                data[key] = None
        return data


@dataclass
class AWSCredentials:
    """AWS credentials for Polly."""

    access_key_id: str = ""
    secret_access_key: str = ""
    region: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["AWSCredentials"]:
        if not data:
            return None
        return cls(
            access_key_id=data.get("accessKeyId") or "",
            secret_access_key=data.get("secretAccessKey") or "",
            region=data.get("region") or "",
        )

    @classmethod
    def from_config(cls) -> "AWSCredentials":
        return cls(
            access_key_id=Config.AWS_ACCESS_KEY_ID,
            secret_access_key=Config.AWS_SECRET_ACCESS_KEY,
            region=Config.AWS_REGION,
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.access_key_id and self.secret_access_key)


@dataclass
class Credentials:
    """
    Optional per-request credential overrides.

    Anything left unset falls back to Config (environment / .env).
    Accepts the camelCase keys sent by API clients.
    """

    openai_api_key: Optional[str] = None
    image_api_key: Optional[str] = None
    aws: Optional[AWSCredentials] = None
    system_prompt: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Credentials":
        if not data:
            return cls()
        return cls(
            openai_api_key=data.get("openaiApiKey") or None,
            image_api_key=data.get("imageApiKey") or data.get("nanoBananaApiKey") or None,
            aws=AWSCredentials.from_dict(data.get("awsCredentials")),
            system_prompt=data.get("customSystemPrompt") or None,
        )

    @property
    def image_key(self) -> Optional[str]:
        """Key for image generation; the OpenAI key doubles as image key."""
        return self.image_api_key or self.openai_api_key


@dataclass
class MediaPaths:
    """Paths of the media files generated for one card."""

    image_polite: str
    audio_polite: str
    image_casual: Optional[str] = None
    audio_casual: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "imagePolite": self.image_polite,
            "imageCasual": self.image_casual,
            "audioPolite": self.audio_polite,
            "audioCasual": self.audio_casual,
        }


def utc_timestamp() -> str:
    """ISO 8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T09:30:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class CardRecord:
    """One generated flashcard as persisted in the card store."""

    id: str
    source_input: str
    data: CardData
    media: MediaPaths
    anki_fields: Dict[str, str]
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def has_polite_and_casual(self) -> bool:
        return self.data.has_polite_and_casual

    def to_dict(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {"id": self.id}
        record.update(self.data.to_dict())
        # The pipeline's input wins over the LLM's echo of it
        record["source_input"] = self.source_input
        record["media"] = self.media.to_dict()
        record["ankiFields"] = dict(self.anki_fields)
        record["timestamp"] = self.timestamp
        return record
