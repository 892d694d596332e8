"""Inverted index over SearchDocuments, with positions for phrase scoring."""

from collections.abc import Iterable

from loguru import logger

from gitsite.core.search.tokenizer import tokenize
from gitsite.models.node import DocumentEntry, SearchDocument, SearchHit

SNIPPET_LENGTH = 300

# Extra score for each place where two consecutive query tokens appear side by side.
ADJACENCY_BONUS = 2


def shorten(s: str, length: int = SNIPPET_LENGTH) -> str:
    return s[:length] + "..." if len(s) > length else s


def document_text(doc: SearchDocument) -> str:
    """The text indexed for a document: title, optional summary, content."""
    parts = [doc.title]
    if doc.summary:
        parts.append(doc.summary)
    parts.append(doc.content)
    return "\n".join(parts)


class SearchIndex:
    """Token -> {document id -> positions} plus the id side table.

    Built once per run and not modified afterwards.
    """

    def __init__(
        self,
        postings: dict[str, dict[int, list[int]]] | None = None,
        documents: dict[int, DocumentEntry] | None = None,
    ) -> None:
        self.postings: dict[str, dict[int, list[int]]] = postings or {}
        self.documents: dict[int, DocumentEntry] = documents or {}

    def add(self, doc: SearchDocument) -> None:
        if doc.id in self.documents:
            msg = f"Duplicate document id {doc.id!r} ({doc.uri})"
            raise ValueError(msg)
        logger.debug("add doc {}: {}", doc.id, doc.title)
        self.documents[doc.id] = DocumentEntry(
            uri=doc.uri, title=doc.title, snippet=shorten(doc.content)
        )
        for position, token in enumerate(tokenize(document_text(doc))):
            self.postings.setdefault(token, {}).setdefault(doc.id, []).append(position)

    def lookup(self, token: str) -> set[int]:
        """Exact-token lookup: ids of documents containing token."""
        return set(self.postings.get(token, {}))

    def score(self, doc_id: int, tokens: list[str]) -> int:
        """Summed term frequency plus a bonus for adjacent consecutive query tokens."""
        total = sum(len(self.postings[t][doc_id]) for t in dict.fromkeys(tokens))
        for first, second in zip(tokens, tokens[1:]):
            following = set(self.postings[second][doc_id])
            total += ADJACENCY_BONUS * sum(
                1 for p in self.postings[first][doc_id] if p + 1 in following
            )
        return total

    def ranked(self, query: str) -> list[tuple[int, int]]:
        """(score, id) of documents containing every query token, best first.

        Ties are broken by id so identical indexes give identical results.
        """
        tokens = tokenize(query)
        if not tokens:
            return []
        candidates = set.intersection(*(self.lookup(t) for t in dict.fromkeys(tokens)))
        scored = [(self.score(doc_id, tokens), doc_id) for doc_id in candidates]
        scored.sort(key=lambda sd: (-sd[0], sd[1]))
        return scored

    def match(self, query: str) -> list[int]:
        """Ids of documents containing every query token, best first."""
        return [doc_id for _score, doc_id in self.ranked(query)]

    def search(self, query: str, limit: int = 20) -> list[SearchHit]:
        hits: list[SearchHit] = []
        for score, doc_id in self.ranked(query)[:limit]:
            entry = self.documents[doc_id]
            hits.append(
                SearchHit(
                    id=doc_id,
                    uri=entry.uri,
                    title=entry.title,
                    snippet=entry.snippet,
                    score=score,
                )
            )
        return hits


def build_index(docs: Iterable[SearchDocument]) -> SearchIndex:
    """Tokenize and index every document."""
    index = SearchIndex()
    for doc in docs:
        index.add(doc)
    logger.info(
        "Indexed {} documents, {} distinct tokens", len(index.documents), len(index.postings)
    )
    return index
