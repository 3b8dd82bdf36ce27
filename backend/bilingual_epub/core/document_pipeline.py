"""Document pipeline - translates every markup entry of an ePub archive."""

import logging

from bilingual_epub.core.epub.archive import EpubArchive
from bilingual_epub.core.epub.extractor import extract_blocks
from bilingual_epub.core.epub.markup import is_markup_entry
from bilingual_epub.core.epub.reinserter import reinsert_translations
from bilingual_epub.core.translation.models import TranslationOutcome, UsageTotals
from bilingual_epub.core.translation.orchestrator import ChunkedTranslator

logger = logging.getLogger(__name__)


class DocumentPipeline:
    """Runs extraction, translation and reinsertion over an archive.

    Entries are handled one at a time in archive order. Markup entries
    (``.xhtml``, ``.xml``, ``.html``, ``.htm``) are translated; all other
    entries are copied unchanged. Nothing is written unless every entry
    succeeds.
    """

    def __init__(self, translator: ChunkedTranslator):
        self.translator = translator
        self.totals = UsageTotals()
        self.translator.observers.append(self._record_usage)

    async def run(self, archive: EpubArchive) -> bytes:
        """Translate an archive.

        Args:
            archive: Input/output entry store

        Returns:
            Bytes of the finished output archive
        """
        logger.debug("[Pipeline] translate start")
        names = archive.list_entries()

        translated_entries: list[tuple[str, bytes]] = []
        for count, name in enumerate(names, start=1):
            logger.info(f"[Pipeline] {count}/{len(names)} {name}")
            content = archive.read(name)
            if is_markup_entry(name):
                content = await self.translate_entry(name, content)
            translated_entries.append((name, content))
        logger.debug("[Pipeline] translate end")

        for name, content in translated_entries:
            archive.create(name, content)
        data = archive.finalize()

        usage = self.totals.usage
        logger.info(
            f"[Pipeline] {self.totals.requests} requests "
            f"({self.totals.mismatches} with line count errors), "
            f"prompt tokens: {usage.prompt_tokens} completion tokens: {usage.completion_tokens} "
            f"total tokens: {usage.total_tokens}"
        )
        cost = self.totals.estimate_cost_usd()
        if cost is not None:
            logger.info(f"[Pipeline] estimated cost ({self.totals.model}): ${cost:.4f}")
        return data

    async def translate_entry(self, name: str, content: bytes) -> bytes:
        """Translate one markup entry.

        Blank entries and entries without translatable blocks are returned
        unchanged.
        """
        if not content.strip():
            return content

        blocks = extract_blocks(content, name)
        if not blocks:
            logger.debug(f"[Pipeline] {name}: no translatable blocks")
            return content

        translated = await self.translator.translate(blocks)
        return reinsert_translations(content, translated, name)

    def _record_usage(self, outcome: TranslationOutcome) -> None:
        self.totals.add(outcome)

