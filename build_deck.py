"""
jpanki: Anki package export
---------------------------

Packages every saved card (out/data.json) and its media into an .apkg file.

Usage:
    python build_deck.py [output.apkg]
"""

import asyncio
import sys
from pathlib import Path

from jpanki.config import Config
from jpanki.deck import AnkiDeckBuilder
from jpanki.utils import setup_logger

logger = setup_logger()


async def main(output_file=None):
    """Main entry point."""
    if not Path(Config.DATA_JSON_FILE).exists():
        print(f"❌ Error: {Config.DATA_JSON_FILE} not found!")
        print("Generate some cards first (python generate_cards.py <input-file>).")
        return False

    try:
        builder = AnkiDeckBuilder()
        if builder.build() == 0:
            print("[!] No cards to export.")
            return False

        builder.export(output_file)
        return True

    except KeyboardInterrupt:
        print("\n[!] Build interrupted by user.")
        return False
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return False


if __name__ == "__main__":
    try:
        success = asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n[!] Aborted by user.")
        sys.exit(1)
