# tf-idf: relevance-ranked search over the knowledge base
from __future__ import annotations
import logging
from collections import defaultdict
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from scipy import sparse
from sklearn.feature_extraction.text import CountVectorizer

import config
from fuzzy_match import edit_distance
from text_processing import stem_word, tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Document:
    identifier: str
    title: str = ""
    body: str = ""
    source_reference: Optional[str] = None

    def __post_init__(self):
        # crawled pages sometimes come without a title or text
        object.__setattr__(self, "title", self.title or "")
        object.__setattr__(self, "body", self.body or "")

    @property
    def text(self) -> str:
        return self.title + " " + self.body

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "identifier": self.identifier,
            "title": self.title,
            "body": self.body,
            "source_reference": self.source_reference,
        }


@dataclass(frozen=True)
class WeightedTerm:
    term: str
    weight: float


@dataclass(frozen=True, eq=False)
class Index:
    """One corpus generation: documents, vocabulary, IDF table, TF-IDF matrix and stem groups.

    Rows of ``tf_idf`` follow corpus order, columns follow ``terms``
    (``vocabulary`` maps a term back to its column).
    """
    documents: Tuple[Document, ...]
    terms: Tuple[str, ...]
    vocabulary: Mapping[str, int]
    idf: np.ndarray
    tf_idf: sparse.csr_matrix
    stem_groups: Mapping[str, Tuple[str, ...]]

    def __len__(self) -> int:
        return len(self.documents)

    def idf_of(self, term: str) -> float:
        col = self.vocabulary.get(term)
        return 0.0 if col is None else float(self.idf[col])

    def document_vector(self, position: int) -> Dict[str, float]:
        row = self.tf_idf[position]
        return {self.terms[col]: float(w) for col, w in zip(row.indices, row.data)}


def _freeze(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


def _empty_index(documents: Tuple[Document, ...]) -> Index:
    return Index(
        documents=documents,
        terms=(),
        vocabulary=MappingProxyType({}),
        idf=_freeze(np.zeros(0)),
        tf_idf=sparse.csr_matrix((len(documents), 0)),
        stem_groups=MappingProxyType({}),
    )


def _as_terms(terms: List[str]) -> List[str]:
    # documents are tokenized up front, the vectorizer only counts
    return terms


def build_index(documents: Sequence[Document]) -> Optional[Index]:
    """Build the TF-IDF index for one corpus generation. No documents -> None."""
    documents = tuple(documents)
    if not documents:
        return None

    term_lists = [tokenize(doc.text) for doc in documents]
    if not any(term_lists):
        logger.warning("None of the %d documents contain indexable terms", len(documents))
        return _empty_index(documents)

    cv = CountVectorizer(analyzer=_as_terms)
    counts = cv.fit_transform(term_lists).tocsr()
    vocabulary = {str(term): int(col) for term, col in cv.vocabulary_.items()}
    terms = tuple(sorted(vocabulary, key=vocabulary.get))

    # TF: count / number of filtered tokens in the document
    totals = np.maximum(1, np.array([len(t) for t in term_lists], dtype=float))
    tf = sparse.diags(1.0 / totals) @ counts

    n = len(documents)
    df = np.bincount(counts.indices, minlength=len(terms))
    idf = np.log((n + 1) / (df + 1)) + 1.0
    tf_idf = (tf @ sparse.diags(idf)).tocsr()

    groups = defaultdict(list)
    for term in terms:
        groups[stem_word(term)].append(term)

    logger.debug("Indexed %d documents, %d terms, %d stem groups", n, len(terms), len(groups))
    return Index(
        documents=documents,
        terms=terms,
        vocabulary=MappingProxyType(vocabulary),
        idf=_freeze(idf),
        tf_idf=tf_idf,
        stem_groups=MappingProxyType({stem: tuple(members) for stem, members in groups.items()}),
    )


def _fuzzy_candidates(token: str, index: Index) -> Tuple[WeightedTerm, ...]:
    max_dist = 1 if len(token) <= 6 else 2
    best: Dict[str, int] = {}

    for term in index.terms:
        if abs(len(term) - len(token)) > max_dist:
            continue
        d = edit_distance(token, term, max_dist)
        if d <= max_dist:
            best[term] = d

    # misspelled inflections ("bateries") are often closer stem to stem
    token_stem = stem_word(token)
    for stem, members in index.stem_groups.items():
        if abs(len(stem) - len(token_stem)) > max_dist:
            continue
        d = edit_distance(token_stem, stem, max_dist)
        if d > max_dist:
            continue
        for term in members:
            # a surface match already found keeps its own distance
            if term not in best:
                best[term] = d

    return tuple(WeightedTerm(term, config.FUZZY_WEIGHTS[d]) for term, d in best.items())


def expand_token(token: str, index: Index) -> Tuple[WeightedTerm, ...]:
    """Resolve a query token to weighted vocabulary terms.

    The first tier that matches wins: exact term (1.0), same stem (0.85),
    then edit distance for tokens of five letters or more (0.7 at distance 1,
    0.5 at distance 2).
    """
    if token in index.vocabulary:
        return (WeightedTerm(token, 1.0),)

    group = index.stem_groups.get(stem_word(token))
    if group:
        return tuple(WeightedTerm(term, config.STEM_WEIGHT) for term in group)

    if len(token) < config.FUZZY_MIN_TOKEN_LEN:
        return ()
    return _fuzzy_candidates(token, index)


def score_documents(query: str, index: Optional[Index]) -> List[Tuple[int, float]]:
    """Return (corpus position, score) for every document scoring above zero, best first."""
    if index is None or not index.terms:
        return []
    keywords = tokenize(query)
    if not keywords:
        return []

    # contributions of every keyword and expansion add up, no normalisation
    weights = np.zeros(len(index.terms))
    for keyword in keywords:
        for candidate in expand_token(keyword, index):
            weights[index.vocabulary[candidate.term]] += candidate.weight

    scores = index.tf_idf @ weights
    hits = [(pos, float(score)) for pos, score in enumerate(scores) if score > 0]
    hits.sort(key=lambda x: (-x[1], x[0]))
    logger.debug("Query %r: %d keywords, %d matching documents", query, len(keywords), len(hits))
    return hits


def search(query: str, index: Optional[Index], top_k: int = config.TOP_K) -> List[Document]:
    """Return at most top_k documents for the query, most relevant first."""
    return [index.documents[pos] for pos, _ in score_documents(query, index)[:top_k]]
