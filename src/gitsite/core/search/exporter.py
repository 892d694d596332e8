"""Export a SearchIndex as self-contained chunks, and import it back.

The export is a list of (key, data) chunks: 'docs', 'postings.0' ..
'postings.N' and finally a 'manifest' holding the format version and a
SHA-1 of every other chunk. An export missing any chunk, or of another
version, is rejected as a whole.
"""

import hashlib
import json
from dataclasses import dataclass
from typing import Any

from loguru import logger

from gitsite.core.search.index import ADJACENCY_BONUS, SearchIndex
from gitsite.core.search.tokenizer import TOKENIZER_JS
from gitsite.errors import IndexFormatError
from gitsite.models.node import DocumentEntry

FORMAT_VERSION = 1
FORMAT_NAME = "gitsite-search-index"
MANIFEST_KEY = "manifest"
DEFAULT_CHUNK_SIZE = 1000


def _dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _digest(data: str) -> str:
    return hashlib.sha1(data.encode("utf-8")).hexdigest()


def format_size(length: int) -> str:
    """Human readable size of an artifact of `length` characters."""
    size = length / 1024
    unit = "kb"
    if size > 1024:
        size = size / 1024
        unit = "mb"
    return f"{size:.1f} {unit}"


@dataclass(frozen=True)
class IndexExport:
    """A complete, ordered set of index chunks (manifest last)."""

    chunks: tuple[tuple[str, str], ...]

    def to_json(self) -> str:
        return _dumps({"format": FORMAT_NAME, "chunks": [list(kv) for kv in self.chunks]})

    def to_javascript(self) -> str:
        """Render a browser script that rebuilds the index and registers a search function.

        The script needs nothing but itself: the tokenizer is embedded so
        queries are tokenized exactly like the indexed documents.
        """
        js_code = ["// search in browser:", "(function () {", TOKENIZER_JS]
        js_code.append("const chunks = Object.create(null);")
        for key, data in self.chunks:
            js_code.append(f"chunks[{json.dumps(key)}] = {data};")
        js_code.append(
            _JS_RUNTIME.replace("__FORMAT_VERSION__", str(FORMAT_VERSION)).replace(
                "__ADJACENCY_BONUS__", str(ADJACENCY_BONUS)
            )
        )
        js_code.append("window.onsearchready && window.onsearchready(searchFn);")
        js_code.append("})();")
        return "\n".join(js_code) + "\n"


_JS_RUNTIME = """\
const manifest = chunks['manifest'];
if (manifest.version !== __FORMAT_VERSION__) {
    throw new Error('unsupported search index version: ' + manifest.version);
}
const postings = Object.create(null);
for (const key of manifest.chunks) {
    if (key.startsWith('postings.')) {
        Object.assign(postings, chunks[key]);
    }
}
const docs = new Map(chunks['docs'].map(d => [d[0], d]));
const positionsOf = (token, id) => {
    for (const e of postings[token] || []) {
        if (e[0] === id) {
            return e[1];
        }
    }
    return [];
};
const searchFn = (q, limit = 20) => {
    const tokens = tokenizer(q);
    if (tokens.length === 0) {
        return [];
    }
    const unique = [...new Set(tokens)];
    let candidates = null;
    for (const t of unique) {
        const ids = new Set((postings[t] || []).map(e => e[0]));
        candidates = candidates === null ? ids : new Set([...candidates].filter(id => ids.has(id)));
    }
    const scored = [];
    for (const id of candidates) {
        let score = 0;
        for (const t of unique) {
            score += positionsOf(t, id).length;
        }
        for (let i = 0; i + 1 < tokens.length; i++) {
            const following = new Set(positionsOf(tokens[i + 1], id));
            for (const p of positionsOf(tokens[i], id)) {
                if (following.has(p + 1)) {
                    score += __ADJACENCY_BONUS__;
                }
            }
        }
        scored.push([score, id]);
    }
    scored.sort((a, b) => (b[0] - a[0]) || (a[1] - b[1]));
    return scored.slice(0, limit).map(([score, id]) => {
        const d = docs.get(id);
        return { uri: d[1], title: d[2], content: d[3] };
    });
};"""


def export_index(index: SearchIndex, chunk_size: int = DEFAULT_CHUNK_SIZE) -> IndexExport:
    """Serialize an index into deterministic chunks.

    Either returns a complete export or raises; there is no partial result.
    """
    if chunk_size < 1:
        msg = f"chunk_size must be positive, got {chunk_size!r}"
        raise ValueError(msg)

    chunks: list[tuple[str, str]] = []
    docs = [
        [doc_id, entry.uri, entry.title, entry.snippet]
        for doc_id, entry in sorted(index.documents.items())
    ]
    chunks.append(("docs", _dumps(docs)))

    tokens = sorted(index.postings)
    for n, start in enumerate(range(0, len(tokens), chunk_size)):
        part = {
            token: [list(entry) for entry in sorted(index.postings[token].items())]
            for token in tokens[start : start + chunk_size]
        }
        chunks.append((f"postings.{n}", _dumps(part)))

    manifest = {
        "version": FORMAT_VERSION,
        "chunks": [key for key, _data in chunks],
        "digests": {key: _digest(data) for key, data in chunks},
        "documents": len(docs),
    }
    chunks.append((MANIFEST_KEY, _dumps(manifest)))
    for key, data in chunks:
        logger.debug("export index: {}: {} chars", key, len(data))
    return IndexExport(chunks=tuple(chunks))


def _parse(key: str, data: str) -> Any:
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        msg = f"Chunk {key!r} is not valid JSON: {e}"
        raise IndexFormatError(msg) from e


def import_chunks(chunks: list[tuple[str, str]] | tuple[tuple[str, str], ...]) -> SearchIndex:
    """Rebuild a SearchIndex from exported chunks, validating them first."""
    by_key = dict(chunks)
    if MANIFEST_KEY not in by_key:
        msg = "Search index has no manifest (export did not complete)"
        raise IndexFormatError(msg)
    manifest = _parse(MANIFEST_KEY, by_key.pop(MANIFEST_KEY))
    if not isinstance(manifest, dict) or manifest.get("version") != FORMAT_VERSION:
        version = manifest.get("version") if isinstance(manifest, dict) else None
        msg = f"Unsupported search index version {version!r}, expected {FORMAT_VERSION}"
        raise IndexFormatError(msg)

    expected = manifest.get("chunks", [])
    digests = manifest.get("digests", {})
    declared = manifest.get("documents")
    if (
        not isinstance(expected, list)
        or not all(isinstance(key, str) for key in expected)
        or not isinstance(digests, dict)
        or not isinstance(declared, int)
    ):
        msg = "Search index manifest is malformed"
        raise IndexFormatError(msg)

    missing = [key for key in expected if key not in by_key]
    if "docs" not in expected:
        missing.insert(0, "docs")
    unexpected = sorted(set(by_key) - set(expected))
    if missing or unexpected:
        msg = f"Search index chunks mismatch: missing {missing!r}, unexpected {unexpected!r}"
        raise IndexFormatError(msg)
    for key in expected:
        if _digest(by_key[key]) != digests.get(key):
            msg = f"Search index chunk {key!r} is corrupt (digest mismatch)"
            raise IndexFormatError(msg)

    index = SearchIndex()
    try:
        for doc_id, uri, title, snippet in _parse("docs", by_key["docs"]):
            index.documents[doc_id] = DocumentEntry(uri=uri, title=title, snippet=snippet)
        for key in expected:
            if not key.startswith("postings."):
                continue
            for token, entries in _parse(key, by_key[key]).items():
                index.postings[token] = {doc_id: list(positions) for doc_id, positions in entries}
    except (TypeError, ValueError, AttributeError) as e:
        msg = f"Search index chunks have an unexpected shape: {e}"
        raise IndexFormatError(msg) from e

    if len(index.documents) != declared:
        msg = f"Search index declares {declared!r} documents but contains {len(index.documents)}"
        raise IndexFormatError(msg)
    return index


def load_index(text: str) -> SearchIndex:
    """Load an index from IndexExport.to_json() output."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Search index is not valid JSON: {e}"
        raise IndexFormatError(msg) from e
    if not isinstance(payload, dict) or payload.get("format") != FORMAT_NAME:
        msg = "Not a search index export"
        raise IndexFormatError(msg)
    try:
        chunks = [(str(key), str(data)) for key, data in payload.get("chunks", [])]
    except (TypeError, ValueError) as e:
        msg = f"Malformed search index chunks: {e}"
        raise IndexFormatError(msg) from e
    return import_chunks(chunks)
