"""
Command-line entry point for one-off translations.

Usage:
    record-translator "Bonjour le monde" --from fr --to en
    record-translator "<p>Bonjour</p>" --from fr --to en --html
    record-translator "Le projet" --from fr --to en -g projet=project -c "portfolio site"

Environment:
    MISTRAL_API_KEY: API key (required)
    TRANSLATOR_CONFIG: Optional YAML configuration file
"""

from __future__ import annotations

import argparse
import sys
from typing import Dict, List, Optional

from . import __version__
from .config import load_config
from .errors import TranslatorError
from .logging_utils import configure_logging
from .services.client import ChatCompletionClient
from .services.translation_service import TranslationService


def _parse_glossary(entries: List[str]) -> Dict[str, str]:
    glossary: Dict[str, str] = {}
    for entry in entries:
        term, sep, translation = entry.partition("=")
        if not sep or not term.strip():
            raise argparse.ArgumentTypeError(f"Glossary entries must look like term=translation: {entry!r}")
        glossary[term.strip()] = translation.strip()
    return glossary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="record-translator",
        description="Translate text with the configured chat-completion API",
    )
    parser.add_argument("text", help="Text (or HTML with --html) to translate")
    parser.add_argument("--from", dest="source", help="Source locale (default: configured default locale)")
    parser.add_argument("--to", dest="target", required=True, help="Target locale")
    parser.add_argument("-c", "--context", help="Domain context given to the model")
    parser.add_argument(
        "-g",
        "--glossary",
        action="append",
        default=[],
        metavar="TERM=TRANSLATION",
        help="Glossary entry (repeatable)",
    )
    parser.add_argument("--html", action="store_true", help="Treat input as HTML content")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "WARNING")

    try:
        glossary = _parse_glossary(args.glossary) or None
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    try:
        config = load_config(args.config)
        service = TranslationService(ChatCompletionClient(config))
        source = args.source or config.default_locale
        translate = service.translate_html if args.html else service.translate_text
        result = translate(args.text, source, args.target, context=args.context, glossary=glossary)
    except TranslatorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
