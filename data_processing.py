import json
import logging
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd

import config
from tf_idf_search import Document, Index, build_index, score_documents

logger = logging.getLogger(__name__)

DOCUMENT_COLUMNS = ["identifier", "title", "body", "source_reference"]
TRUNCATED_MARKER = "\n... [truncated]"


def read_page_files(data_dir):
    """Read the crawler's output: one JSON object per page with url, title and text."""
    records = []
    for path in sorted(Path(data_dir).glob("*.json")):
        try:
            with open(path, encoding="utf-8") as f:
                page = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Skipping page file %s: %s", path.name, e)
            continue
        if not isinstance(page, dict):
            logger.warning("Skipping page file %s: not a JSON object", path.name)
            continue
        records.append({
            "identifier": path.stem,
            "title": page.get("title"),
            "body": page.get("text"),
            "source_reference": page.get("url"),
        })
    return pd.DataFrame.from_records(records, columns=DOCUMENT_COLUMNS)


def read_table(path):
    """Read a tab (.tsv) or comma separated table of documents."""
    sep = "\t" if Path(path).suffix.lower() == ".tsv" else ","
    table = pd.read_csv(path, sep=sep, dtype=str, keep_default_na=False)
    for column in DOCUMENT_COLUMNS:
        if column not in table.columns:
            table[column] = ""
    # rows without an identifier fall back to their position
    positions = pd.Series(table.index.astype(str), index=table.index)
    table["identifier"] = table["identifier"].where(table["identifier"] != "", positions)
    return table[DOCUMENT_COLUMNS]


def documents_from_frame(frame) -> List[Document]:
    frame = frame.fillna("")
    documents = []
    for row in frame.itertuples(index=False):
        documents.append(Document(
            identifier=str(row.identifier),
            title=str(row.title),
            body=str(row.body),
            source_reference=str(row.source_reference) or None,
        ))
    return documents


def load_documents(path=None) -> List[Document]:
    """Load the full corpus from a directory of page files or a document table."""
    path = Path(path or config.DATA_DIR)
    if path.is_dir():
        frame = read_page_files(path)
    elif path.is_file():
        frame = read_table(path)
    else:
        logger.warning("Knowledge base source %s does not exist, starting with no documents", path)
        return []
    documents = documents_from_frame(frame)
    logger.info("Loaded %d pages into knowledge base from %s", len(documents), path)
    return documents


def compose_context(
    documents: Sequence[Document],
    max_total_chars: Optional[int] = None,
    separator: str = "\n\n",
) -> str:
    """
    Render search results as the knowledge-base block of the model prompt.

    - One "## title" section per document, in ranking order.
    - Hard cap of max_total_chars; the section that overflows is cut and
      marked, anything after it is dropped.
    - No documents, or no room for a single section, gives the
      "no relevant content" placeholder.
    """
    limit = config.MAX_CONTEXT_CHARS if max_total_chars is None else max_total_chars
    if not documents:
        return config.NO_CONTEXT_TEXT

    parts: List[str] = []
    total = 0
    for doc in documents:
        block = f"## {doc.title}\n{doc.body}"
        sep = separator if parts else ""
        extra = len(sep) + len(block)
        if total + extra > limit:
            take = limit - total - len(sep) - len(TRUNCATED_MARKER)
            if take > 0:
                parts.append(sep + block[:take] + TRUNCATED_MARKER)
            break
        parts.append(sep + block)
        total += extra
    # cap too small for even the first section
    return "".join(parts) or config.NO_CONTEXT_TEXT


class KnowledgeBase:
    """Owns the published index.

    refresh() builds a complete new index and publishes it with a single
    assignment, so readers see either the old or the new generation and
    never need a lock.
    """

    def __init__(self, loader: Optional[Callable[[], Sequence[Document]]] = None):
        self._loader = loader or load_documents
        self._index: Optional[Index] = None
        self._refresh_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._interval: Optional[float] = None

    @property
    def snapshot(self) -> Optional[Index]:
        return self._index

    def refresh(self, documents: Optional[Sequence[Document]] = None) -> int:
        with self._refresh_lock:
            if documents is None:
                documents = self._loader()
            index = build_index(documents)
            self._index = index
        if index is None:
            logger.info("Published empty index")
            return 0
        logger.info("Published index: %d documents, %d terms", len(index), len(index.terms))
        return len(index)

    def ranked(self, query: str) -> List[Tuple[Document, float]]:
        index = self._index
        hits = score_documents(query, index)[:config.TOP_K]
        return [(index.documents[pos], score) for pos, score in hits]

    def search(self, query: str) -> List[Document]:
        return [doc for doc, _ in self.ranked(query)]

    def context(self, query: str) -> str:
        return compose_context(self.search(query))

    def documents(self) -> Tuple[Document, ...]:
        index = self._index
        return () if index is None else index.documents

    def get_document(self, identifier: str) -> Optional[Document]:
        for doc in self.documents():
            if doc.identifier == identifier:
                return doc
        return None

    def term_weights(self, term: str) -> Optional[Dict[str, object]]:
        """IDF of a vocabulary term and its TF-IDF weight in every document containing it."""
        index = self._index
        if index is None or term not in index.vocabulary:
            return None
        documents = {}
        for pos, doc in enumerate(index.documents):
            weight = index.document_vector(pos).get(term)
            if weight:
                documents[doc.identifier] = weight
        return {"term": term, "idf": index.idf_of(term), "documents": documents}

    # ---- periodic reload -------------------------------------------------

    def start_refresh_timer(self, interval_seconds: float) -> bool:
        """Reload from the loader every interval_seconds. Non-positive disables."""
        self.stop_refresh_timer()
        if interval_seconds <= 0:
            return False
        self._interval = interval_seconds
        self._schedule(interval_seconds)
        return True

    def stop_refresh_timer(self):
        self._interval = None
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self, interval):
        timer = threading.Timer(interval, self._scheduled_refresh)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _scheduled_refresh(self):
        try:
            self.refresh()
        except Exception:
            logger.exception("Scheduled refresh failed, keeping the previous index")
        interval = self._interval
        if interval is not None:
            self._schedule(interval)
