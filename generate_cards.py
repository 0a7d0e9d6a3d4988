"""
jpanki: Bulk card generation
----------------------------

Reads a newline-delimited file of Japanese words/sentences and generates a
card (LLM data, images, audio, CSV row) for each line.

Usage:
    python generate_cards.py <input-file>
"""

import asyncio
import sys
from pathlib import Path

from jpanki.config import Config
from jpanki.services import CardPipeline
from jpanki.utils import TextParser, setup_logger

logger = setup_logger()


def print_progress(stage: str, message: str) -> None:
    print(f"  [{stage}] {message}")


async def main(input_file: str) -> bool:
    """Main entry point."""
    path = Path(input_file)
    if not path.exists():
        print(f"❌ Error: {input_file} not found!")
        return False

    lines = TextParser.split_input_lines(path.read_text(encoding="utf-8-sig"))
    if not lines:
        print(f"❌ Error: {input_file} has no inputs.")
        return False

    Config.ensure_dirs()

    async with CardPipeline() as pipeline:
        if not pipeline.ai_service.is_configured:
            print("❌ Error: OPENAI_API_KEY is not set (see .env.example).")
            return False

        print(f"Found {len(lines)} inputs to process\n")
        result = await pipeline.process_bulk(lines, on_progress=print_progress)

    print("\n" + "=" * 60)
    print(f"[OK] Processed: {result.processed}/{result.total}")
    if result.failed:
        print(f"[WARN] Failed:   {result.failed}")
        for error in result.errors:
            print(f"  - {error['input']}: {error['error']}")
    print("Output files:")
    print(f"  - {Config.DATA_JSON_FILE}")
    print(f"  - {Config.CSV_FILE}")
    print(f"  - {Config.MEDIA_DIR}/")
    print("=" * 60)
    return True


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python generate_cards.py <input-file>")
        sys.exit(1)
    try:
        success = asyncio.run(main(sys.argv[1]))
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n[!] Aborted by user.")
        sys.exit(1)
