"""Global settings and configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the working directory (project root when run from a checkout)
load_dotenv(Path.cwd() / ".env")


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.environ.get(key, default))
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.environ.get(key, default))
    except ValueError:
        return default


@dataclass
class Config:
    """Application-wide configuration."""

    # OpenAI chat completions (card data)
    # NEVER hardcode secret keys in source code!
    OPENAI_API_KEY: str = os.environ.get("OPENAI_API_KEY", "")
    OPENAI_API_URL: str = os.environ.get("OPENAI_API_URL", "https://api.openai.com/v1")
    LLM_MODEL: str = os.environ.get("LLM_MODEL", "gpt-4o")
    LLM_TEMPERATURE: float = _env_float("LLM_TEMPERATURE", 0.3)

    # Image generation (falls back to OPENAI_API_KEY when unset)
    IMAGE_API_KEY: str = os.environ.get("IMAGE_API_KEY", "")
    IMAGE_MODEL: str = os.environ.get("IMAGE_MODEL", "dall-e-3")
    IMAGE_SIZE: str = os.environ.get("IMAGE_SIZE", "1024x1024")
    IMAGE_QUALITY: str = os.environ.get("IMAGE_QUALITY", "standard")

    # Speech synthesis
    AUDIO_PROVIDER: str = os.environ.get("AUDIO_PROVIDER", "polly")  # Options: polly, edge_tts
    AWS_ACCESS_KEY_ID: str = os.environ.get("AWS_ACCESS_KEY_ID", "")
    AWS_SECRET_ACCESS_KEY: str = os.environ.get("AWS_SECRET_ACCESS_KEY", "")
    AWS_REGION: str = os.environ.get("AWS_REGION", "us-east-1")
    POLLY_VOICE: str = os.environ.get("POLLY_VOICE", "Takumi")
    POLLY_ENGINE: str = os.environ.get("POLLY_ENGINE", "neural")
    EDGE_TTS_VOICE: str = os.environ.get("EDGE_TTS_VOICE", "ja-JP-KeitaNeural")
    LANGUAGE_CODE: str = "ja-JP"

    # HTTP client timeouts (seconds)
    TIMEOUT: int = _env_int("TIMEOUT", 60)
    IMAGE_TIMEOUT: int = _env_int("IMAGE_TIMEOUT", 90)

    # Paths
    BASE_DIR: Path = Path(os.environ.get("JPANKI_BASE_DIR", Path.cwd())).resolve()
    MEDIA_DIR: str = os.environ.get("MEDIA_DIR", str(BASE_DIR / "media"))
    OUTPUT_DIR: str = os.environ.get("OUTPUT_DIR", str(BASE_DIR / "out"))
    DATA_JSON_FILE: str = os.environ.get("DATA_JSON_FILE", str(Path(OUTPUT_DIR) / "data.json"))
    CSV_FILE: str = os.environ.get("CSV_FILE", str(Path(OUTPUT_DIR) / "anki.csv"))

    # Anki package export
    DECK_ID: int = _env_int("DECK_ID", 2059400420)
    MODEL_ID: int = _env_int("MODEL_ID", 1607393150)
    DECK_NAME: str = os.environ.get("DECK_NAME", "JP Polite & Casual")

    # HTTP server
    HOST: str = os.environ.get("HOST", "127.0.0.1")
    PORT: int = _env_int("PORT", 3000)
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    @classmethod
    def ensure_dirs(cls) -> None:
        """Create the media and output directories (idempotent)."""
        Path(cls.MEDIA_DIR).mkdir(parents=True, exist_ok=True)
        Path(cls.OUTPUT_DIR).mkdir(parents=True, exist_ok=True)
