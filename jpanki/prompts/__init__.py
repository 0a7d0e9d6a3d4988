"""System prompt templates shipped with the package."""

from pathlib import Path

PROMPTS_DIR = Path(__file__).parent
SYSTEM_PROMPT_FILE = PROMPTS_DIR / "jp_anki_system.txt"


def load_system_prompt() -> str:
    """Read the default system prompt for card generation."""
    return SYSTEM_PROMPT_FILE.read_text(encoding="utf-8")


__all__ = ['load_system_prompt', 'SYSTEM_PROMPT_FILE']
