"""Where the live document text lives."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from writing_annotator.parsers.document_parser import parse_document, write_document

logger = logging.getLogger(__name__)


@runtime_checkable
class DocumentStore(Protocol):
    def get_text(self) -> str: ...

    async def apply_edit(self, new_text: str) -> None: ...


class InMemoryDocumentStore:
    """Keeps the text in memory; edits replace it wholesale."""

    def __init__(self, text: str = ""):
        self._text = text

    def get_text(self) -> str:
        return self._text

    async def apply_edit(self, new_text: str) -> None:
        self._text = new_text


class FileDocumentStore:
    """Text backed by a .txt, .md or .docx file.

    The file is read once on construction. Each edit updates the in-memory
    copy immediately and then writes the file in a worker thread; a failed
    write restores the previous text and re-raises.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._text = parse_document(self.path)
        self._lock = asyncio.Lock()

    def get_text(self) -> str:
        return self._text

    async def apply_edit(self, new_text: str) -> None:
        previous, self._text = self._text, new_text
        async with self._lock:
            try:
                await asyncio.to_thread(write_document, self.path, new_text)
            except Exception:
                self._text = previous
                raise
        logger.debug("Saved %d characters to %s", len(new_text), self.path)
