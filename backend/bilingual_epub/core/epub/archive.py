"""ePub archive access.

The pipeline only needs four operations on a container: list the entries,
read one, add one to the output and finish the output. ``ZipArchiveStore``
implements them over zip files and keeps the output in memory until
``finalize`` so that a failed run leaves no partial file behind.
"""

import logging
from abc import ABC, abstractmethod
from io import BytesIO
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZIP_STORED, BadZipFile, ZipFile

from bilingual_epub.exceptions import ArchiveError

logger = logging.getLogger(__name__)

MIMETYPE_ENTRY = "mimetype"


class EpubArchive(ABC):
    """Abstract entry store read by the document pipeline."""

    @abstractmethod
    def list_entries(self) -> list[str]:
        """Entry names in archive order."""
        pass

    @abstractmethod
    def read(self, name: str) -> bytes:
        """Read one entry from the input."""
        pass

    @abstractmethod
    def create(self, name: str, content: bytes) -> None:
        """Add one entry to the output."""
        pass

    @abstractmethod
    def finalize(self) -> bytes:
        """Finish the output and return the bytes written."""
        pass


class ZipArchiveStore(EpubArchive):
    """Zip-backed archive store.

    Reads entries from ``input_path`` and writes ``output_path`` once, on
    ``finalize``. The ``mimetype`` entry is stored uncompressed as the
    ePub container format requires.
    """

    def __init__(self, input_path: Path | str, output_path: Path | str):
        self.input_path = Path(input_path)
        self.output_path = Path(output_path)

        try:
            self._input = ZipFile(self.input_path, "r")
        except FileNotFoundError as e:
            raise ArchiveError(f"Input file not found: {self.input_path}") from e
        except BadZipFile as e:
            raise ArchiveError(f"Input file is not a zip archive: {self.input_path}") from e

        self._buffer = BytesIO()
        self._output = ZipFile(self._buffer, "w", ZIP_DEFLATED)
        self._finalized = False

    def list_entries(self) -> list[str]:
        return [info.filename for info in self._input.infolist()]

    def read(self, name: str) -> bytes:
        try:
            return self._input.read(name)
        except (KeyError, BadZipFile) as e:
            raise ArchiveError(f"Cannot read entry {name!r}: {e}") from e

    def create(self, name: str, content: bytes) -> None:
        if self._finalized:
            raise ArchiveError("Archive already finalized")
        stored = name == MIMETYPE_ENTRY or name.endswith("/")
        compress_type = ZIP_STORED if stored else ZIP_DEFLATED
        self._output.writestr(name, content, compress_type=compress_type)

    def finalize(self) -> bytes:
        if self._finalized:
            raise ArchiveError("Archive already finalized")
        self._output.close()
        self._input.close()
        self._finalized = True

        data = self._buffer.getvalue()
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_bytes(data)
        logger.info(f"[Archive] Wrote {self.output_path} ({len(data)} bytes)")
        return data

    def close(self) -> None:
        """Release the input file without writing any output."""
        if not self._finalized:
            self._output.close()
            self._input.close()
            self._finalized = True

    def __enter__(self) -> "ZipArchiveStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
