"""
Flippin: language flashcards from the command line
--------------------------------------------------

Usage:
    python flippin_cli.py list [--search TEXT]
    python flippin_cli.py add FRONT BACK [--tag TAG ...] [--notes NOTES]
    python flippin_cli.py translate TEXT
    python flippin_cli.py import cards.csv
    python flippin_cli.py export cards.csv
    python flippin_cli.py presets [--import COLLECTION_ID]
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from flippin import FlippinApp, Language
from flippin.config import Config
from flippin.errors import FlippinError
from flippin.utils import setup_logger

logger = logging.getLogger("flippin.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flippin", description="Language flashcards with live translation")
    parser.add_argument("--data-dir", help=f"Data directory (default: {Config.DATA_DIR})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List cards grouped by language")
    list_cmd.add_argument("--search", default="", help="Only cards containing this text")

    add_cmd = sub.add_parser("add", help="Add a card")
    add_cmd.add_argument("front", help="Text in the target language")
    add_cmd.add_argument("back", help="Text in your language")
    add_cmd.add_argument("--tag", action="append", default=[], help="Tag (repeatable)")
    add_cmd.add_argument("--notes", default="", help="Notes")

    translate_cmd = sub.add_parser("translate", help="Translate text into the target language")
    translate_cmd.add_argument("text")
    translate_cmd.add_argument("--source", help="Source language code (default: your language)")
    translate_cmd.add_argument("--target", help="Target language code (default: target language)")

    import_cmd = sub.add_parser("import", help="Import cards from a pipe-separated CSV file")
    import_cmd.add_argument("csv")

    export_cmd = sub.add_parser("export", help="Export cards to a pipe-separated CSV file")
    export_cmd.add_argument("csv")

    presets_cmd = sub.add_parser("presets", help="List or import built-in phrase collections")
    presets_cmd.add_argument("--import", dest="collection", help="Collection id to import")

    return parser


def _language_arg(code: Optional[str], fallback: Language) -> Language:
    if not code:
        return fallback
    language = Language.from_code(code)
    if language is None:
        raise FlippinError(f"Unknown language code: {code}")
    return language


async def run(args: argparse.Namespace) -> bool:
    """Execute one command."""
    async with FlippinApp(data_dir=args.data_dir) as app:
        if args.command == "list":
            app.set_search_text(args.search)
            groups = app.language_groups()
            if not groups:
                print("No cards.")
            for group in groups:
                print(f"== {group.title} ({len(group.cards)})")
                for card in group.cards:
                    star = "*" if card.is_favorite else " "
                    tags = f"  [{' '.join(card.tags)}]" if card.tags else ""
                    print(f" {star} {card.front_text} | {card.back_text}{tags}")
            return True

        if args.command == "add":
            card = app.store.add_card(
                args.front,
                args.back,
                app.languages.target_language,
                app.languages.user_language,
                notes=args.notes,
                tags=args.tag,
            )
            print(f"Added {card.front_text} | {card.back_text} ({app.store.count} cards)")
            return True

        if args.command == "translate":
            source = _language_arg(args.source, app.languages.user_language)
            target = _language_arg(args.target, app.languages.target_language)
            result = await app.translator.translate(args.text, source, target)
            print(result.text)
            return True

        if args.command == "import":
            count = app.store.import_csv(args.csv)
            print(f"Imported {count} cards from {args.csv}")
            return True

        if args.command == "export":
            count = app.store.export_csv(args.csv)
            print(f"Exported {count} cards to {args.csv}")
            return True

        if args.command == "presets":
            user, target = app.languages.user_language, app.languages.target_language
            if args.collection:
                try:
                    count = app.presets.import_collection(args.collection, user, target)
                except KeyError:
                    raise FlippinError(f"Unknown preset collection: {args.collection}") from None
                print(f"Imported {count} cards from {args.collection} ({app.store.count} cards)")
                return True
            collections = app.presets.get_collections(user, target)
            if not collections:
                print(f"No collections for {user.display_name} -> {target.display_name}.")
            for collection in collections:
                print(f"{collection.id:<22} {collection.name} ({collection.card_count} cards)")
            return True

    return False


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logger(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        success = asyncio.run(run(args))
    except FlippinError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        if e.details:
            logger.debug("Details: %s", e.details)
        return 1
    except KeyboardInterrupt:
        print("\n[!] Aborted by user.", file=sys.stderr)
        return 1
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
