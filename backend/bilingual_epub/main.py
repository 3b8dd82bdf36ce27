"""Command-line entry point.

Usage:
    bilingual-epub openai -i book.epub -o book.ja.epub -l Japanese
    bilingual-epub gemini -i book.epub -o book.en.epub -l English --requests 2
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from bilingual_epub.config import settings
from bilingual_epub.core.document_pipeline import DocumentPipeline
from bilingual_epub.core.epub.archive import ZipArchiveStore
from bilingual_epub.core.llm.providers.factory import BackendFactory, BackendKind
from bilingual_epub.core.translation.orchestrator import ChunkedTranslator
from bilingual_epub.exceptions import TranslatorError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bilingual-epub",
        description="Translate an ePub with an LLM, keeping the original text next to the translation",
    )
    subparsers = parser.add_subparsers(dest="backend", required=True)

    for kind, help_text, default_model in (
        (BackendKind.OPENAI, "Use OpenAI API", settings.openai_model),
        (BackendKind.GEMINI, "Use Gemini API", settings.gemini_model),
    ):
        sub = subparsers.add_parser(kind.value, help=help_text)
        sub.add_argument("-i", "--input", type=Path, required=True, help="input file path")
        sub.add_argument("-o", "--output", type=Path, required=True, help="output file path")
        sub.add_argument("-l", "--language", required=True, help="translate language")
        sub.add_argument(
            "-m", "--model", default=default_model, help=f"model (default: {default_model})"
        )
        sub.add_argument(
            "-a",
            "--api-key",
            default=None,
            help=f"API key (default: ${kind.value.upper()}_API_KEY)",
        )
        sub.add_argument(
            "--lines",
            type=int,
            default=settings.chunk_lines,
            help="number of lines per request",
        )
        sub.add_argument(
            "--requests",
            type=int,
            default=settings.max_concurrent_requests,
            help="number of concurrent requests",
        )
        sub.add_argument(
            "--log-level",
            default=settings.log_level,
            choices=["DEBUG", "INFO", "WARNING", "ERROR"],
            type=str.upper,
            help="logging level",
        )

    return parser


async def run(args: argparse.Namespace) -> None:
    """Build the backend and pipeline from parsed arguments and translate."""
    backend = BackendFactory.create(
        args.backend,
        language=args.language,
        model=args.model,
        api_key=args.api_key,
    )
    translator = ChunkedTranslator(
        backend,
        chunk_size=args.lines,
        max_concurrency=args.requests,
    )
    pipeline = DocumentPipeline(translator)

    with ZipArchiveStore(args.input, args.output) as archive:
        await pipeline.run(archive)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.lines < 1 or args.requests < 1:
        logger.error("--lines and --requests must be positive")
        return 1

    logger.debug("start")
    try:
        asyncio.run(run(args))
    except TranslatorError as e:
        logger.error(f"Translation failed: {e}")
        return 1
    logger.debug("end")
    return 0


if __name__ == "__main__":
    sys.exit(main())
