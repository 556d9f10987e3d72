from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Tuple, Union
import locale
import logging
import unicodedata

from cycle_viewer.analysis.derive import compute
from cycle_viewer.config import ParserConfig
from cycle_viewer.ingest.section_parser import CycleCsvReader
from cycle_viewer.models.store_entry import StoreEntry


logger = logging.getLogger(__name__)

StoreStatus = Literal["idle", "empty", "ready"]
Source = Union[str, bytes, bytearray, memoryview, Path]


def collation_key(name: str) -> Tuple[str, str]:
    """
    Locale-aware sort key for filenames.

    Uses the process LC_COLLATE (set it once at startup for the display language)
    on the NFKC-normalised, case-folded name; the exact name breaks ties so the
    order is total.
    """
    folded = unicodedata.normalize("NFKC", name).casefold()
    return (locale.strxfrm(folded), name)


def set_collation_locale(name: str) -> bool:
    """
    Set the process LC_COLLATE used by :func:`collation_key`.

    Returns False (and logs a warning) when the locale is not installed; the
    previous collation stays in effect.
    """
    try:
        locale.setlocale(locale.LC_COLLATE, name)
    except locale.Error as exc:
        logger.warning("Collation locale '%s' is not available (%s); keeping '%s'",
                       name, exc, locale.setlocale(locale.LC_COLLATE))
        return False
    logger.debug("Collation locale set to '%s'", name)
    return True


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one load batch: names stored, and one warning per rejected file."""
    loaded: Tuple[str, ...] = ()
    warnings: Dict[str, str] = field(default_factory=dict)

    @property
    def n_failed(self) -> int:
        return len(self.warnings)


class DatasetStore:
    """
    Keyed store of every file loaded by the last batch.

    Semantics
    - A batch replaces the whole content (clear, then put per file). There is no
      merge across batches; a duplicated filename inside a batch keeps the last one.
    - Failures are per file: the file is skipped and a warning is recorded under
      its name. A batch where every file fails leaves an empty, valid store.
    - Only one batch may run at a time; a re-entrant call raises RuntimeError.
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.reader = CycleCsvReader(config)
        self._entries: Dict[str, StoreEntry] = {}
        self._warnings: Dict[str, str] = {}
        self._selected: Optional[str] = None
        self._batches = 0
        self._busy = False

    # -------------------------
    # Mapping operations
    # -------------------------
    def clear(self) -> None:
        self._entries.clear()
        self._warnings.clear()
        self._selected = None

    def put(self, entry: StoreEntry) -> None:
        self._entries[entry.filename] = entry

    def get(self, filename: str) -> Optional[StoreEntry]:
        return self._entries.get(filename)

    def keys(self) -> List[str]:
        return list(self._entries.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, filename: object) -> bool:
        return filename in self._entries

    def is_empty(self) -> bool:
        return not self._entries

    def list_filenames(self) -> List[str]:
        """Filenames in collation order (process LC_COLLATE; see set_collation_locale)."""
        return sorted(self._entries, key=collation_key)

    @property
    def warnings(self) -> Dict[str, str]:
        return dict(self._warnings)

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def status(self) -> StoreStatus:
        """'idle' before any batch, 'empty' after a batch that stored nothing, else 'ready'."""
        if self._batches == 0:
            return "idle"
        return "empty" if self.is_empty() else "ready"

    # -------------------------
    # Selection
    # -------------------------
    @property
    def selected(self) -> Optional[str]:
        return self._selected

    def select(self, filename: str) -> Optional[StoreEntry]:
        """Make ``filename`` current. Unknown names leave the selection unchanged."""
        entry = self._entries.get(filename)
        if entry is None:
            logger.debug("select: '%s' is not loaded; selection unchanged", filename)
            return None
        self._selected = filename
        return entry

    def current(self) -> Optional[StoreEntry]:
        if self._selected is None:
            return None
        return self._entries.get(self._selected)

    # -------------------------
    # Batches
    # -------------------------
    def load_batch(self, files: Sequence[Tuple[str, Source]]) -> BatchResult:
        """
        Replace the store content with ``files`` given as ``(filename, source)`` pairs.

        A source is decoded text, raw bytes (e.g. an upload; decoded with the parser
        encoding) or a path. Decoding and reading happen per file, so a file that
        cannot be decoded becomes a warning like any other failure.

        An empty sequence is a no-op: the previous content and status are kept.
        """
        files = list(files)
        if not files:
            logger.debug("load_batch: no files selected; store unchanged")
            return BatchResult()
        return self._run_batch(files)

    def load_paths(self, paths: Iterable[Union[str, Path]]) -> BatchResult:
        """Read files from disk and load them as one batch (read errors are per-file warnings)."""
        paths = [Path(p) for p in paths]
        if not paths:
            logger.debug("load_paths: no files selected; store unchanged")
            return BatchResult()
        return self._run_batch([(p.name, p) for p in paths])

    def _run_batch(self, items: List[Tuple[str, Source]]) -> BatchResult:
        if self._busy:
            raise RuntimeError("a load batch is already in progress")
        self._busy = True
        try:
            self.clear()
            self._batches += 1
            logger.info("Loading batch of %d file(s)", len(items))

            for filename, source in items:
                try:
                    text = self._source_text(source)
                    entry = self._load_one(filename, text)
                except Exception as exc:
                    # last occurrence of a duplicated name decides
                    self._entries.pop(filename, None)
                    self._warnings[filename] = f"{type(exc).__name__}: {exc}"
                    logger.warning("Skipped '%s': %s", filename, exc)
                    continue
                self._warnings.pop(filename, None)
                self.put(entry)
                for msg in entry.warnings:
                    logger.debug("'%s': %s", filename, msg)

            names = self.list_filenames()
            self._selected = names[0] if names else None
            if names:
                logger.info("Loaded %d file(s), %d skipped", len(names), len(self._warnings))
            else:
                logger.warning("No valid files in batch (%d skipped)", len(self._warnings))
            return BatchResult(loaded=tuple(names), warnings=dict(self._warnings))
        finally:
            self._busy = False

    def _source_text(self, source: Source) -> str:
        if isinstance(source, Path):
            return self.reader.read_text(source)
        if isinstance(source, (bytes, bytearray, memoryview)):
            return self.reader.decode(source)
        return source

    def _load_one(self, filename: str, text: str) -> StoreEntry:
        parsed = self.reader.parse(text)
        dataset = compute(parsed)
        return StoreEntry(filename=filename, parsed=parsed, dataset=dataset)
