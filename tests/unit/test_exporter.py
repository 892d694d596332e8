"""Tests for exporting and re-importing the search index."""

import hashlib
import json
import shutil
import subprocess
from pathlib import Path

import pytest

from gitsite.core.search.exporter import (
    FORMAT_VERSION,
    MANIFEST_KEY,
    export_index,
    format_size,
    import_chunks,
    load_index,
)
from gitsite.core.search.index import SearchIndex, build_index
from gitsite.core.search.tokenizer import TOKENIZER_JS, tokenize
from gitsite.errors import IndexFormatError
from gitsite.models.node import SearchDocument

requires_node = pytest.mark.skipif(shutil.which("node") is None, reason="node is not installed")


@pytest.fixture
def index() -> SearchIndex:
    return build_index(
        [
            SearchDocument(id=0, uri="/a", title="Python basics", content="Variables and loops"),
            SearchDocument(id=1, uri="/b", title="Python 进阶", content="装饰器 and generators"),
            SearchDocument(id=2, uri="/c", title="Rust", content="Ownership and borrowing"),
        ]
    )


def test_reimported_index_answers_queries_identically(index: SearchIndex) -> None:
    restored = import_chunks(export_index(index, chunk_size=3).chunks)

    for query in ["python", "and", "装饰器", "rust ownership", "missing"]:
        assert restored.match(query) == index.match(query)
        assert restored.search(query) == index.search(query)
    assert restored.postings == index.postings
    assert restored.documents == index.documents


def test_chunk_layout(index: SearchIndex) -> None:
    exported = export_index(index, chunk_size=5)
    keys = [key for key, _data in exported.chunks]

    assert keys[0] == "docs"
    assert keys[-1] == MANIFEST_KEY
    assert all(key.startswith("postings.") for key in keys[1:-1])
    assert len(keys) - 2 == -(-len(index.postings) // 5)


def test_export_is_deterministic(index: SearchIndex) -> None:
    assert export_index(index) == export_index(index)
    assert export_index(index).to_javascript() == export_index(index).to_javascript()


def test_export_rejects_bad_chunk_size(index: SearchIndex) -> None:
    with pytest.raises(ValueError, match="chunk_size"):
        export_index(index, chunk_size=0)


def test_truncated_export_rejected(index: SearchIndex) -> None:
    chunks = list(export_index(index, chunk_size=2).chunks)

    with pytest.raises(IndexFormatError, match="no manifest"):
        import_chunks(chunks[:-1])
    with pytest.raises(IndexFormatError, match="missing"):
        import_chunks(chunks[:1] + chunks[2:])


def test_unexpected_chunk_rejected(index: SearchIndex) -> None:
    chunks = [*export_index(index).chunks, ("postings.99", "{}")]

    with pytest.raises(IndexFormatError, match="unexpected"):
        import_chunks(chunks)


def test_corrupt_chunk_rejected(index: SearchIndex) -> None:
    chunks = list(export_index(index).chunks)
    key, data = chunks[1]
    chunks[1] = (key, data.replace("python", "pithon"))

    with pytest.raises(IndexFormatError, match="corrupt"):
        import_chunks(chunks)


def test_version_mismatch_rejected(index: SearchIndex) -> None:
    chunks = list(export_index(index).chunks)
    manifest = json.loads(chunks[-1][1])
    manifest["version"] = FORMAT_VERSION + 1
    chunks[-1] = (MANIFEST_KEY, json.dumps(manifest))

    with pytest.raises(IndexFormatError, match="version"):
        import_chunks(chunks)


def test_load_index_round_trip(index: SearchIndex) -> None:
    restored = load_index(export_index(index).to_json())

    assert restored.match("python") == [0, 1]


@pytest.mark.parametrize("text", ["", "not json", "[]", '{"format": "other", "chunks": []}'])
def test_load_index_rejects_garbage(text: str) -> None:
    with pytest.raises(IndexFormatError):
        load_index(text)


def test_empty_index_exports() -> None:
    restored = load_index(export_index(SearchIndex()).to_json())

    assert restored.documents == {}
    assert restored.match("anything") == []


def test_javascript_is_self_contained(index: SearchIndex) -> None:
    js = export_index(index).to_javascript()

    assert js.startswith("// search in browser:")
    assert "function tokenizer(str)" in js
    assert 'chunks["manifest"] = ' in js
    assert "window.onsearchready" in js
    assert "__FORMAT_VERSION__" not in js
    assert "__ADJACENCY_BONUS__" not in js
    assert "装饰器" in js


@pytest.mark.parametrize(
    ("length", "expected"),
    [(0, "0.0 kb"), (1536, "1.5 kb"), (3 * 1024 * 1024, "3.0 mb")],
)
def test_format_size(length: int, expected: str) -> None:
    assert format_size(length) == expected


def _with_manifest(index: SearchIndex, **changes: object) -> list[tuple[str, str]]:
    chunks = list(export_index(index).chunks)
    manifest = json.loads(chunks[-1][1])
    manifest.update(changes)
    chunks[-1] = (MANIFEST_KEY, json.dumps(manifest))
    return chunks


@pytest.mark.parametrize(
    "changes",
    [
        {"digests": []},
        {"digests": "abc"},
        {"chunks": 5},
        {"chunks": ["docs", 1]},
        {"documents": "3"},
        {"documents": None},
    ],
)
def test_malformed_manifest_rejected(index: SearchIndex, changes: dict[str, object]) -> None:
    with pytest.raises(IndexFormatError, match="malformed"):
        import_chunks(_with_manifest(index, **changes))


def test_malformed_manifest_rejected_through_load_index(index: SearchIndex) -> None:
    chunks = _with_manifest(index, digests=[])
    text = json.dumps({"format": "gitsite-search-index", "chunks": [list(c) for c in chunks]})

    with pytest.raises(IndexFormatError):
        load_index(text)


@pytest.mark.parametrize("docs", ["[[0, 1]]", "{}", "[5]", '[[[0], "/a", "A", "s"]]'])
def test_misshapen_docs_chunk_rejected(docs: str) -> None:
    manifest = {
        "version": FORMAT_VERSION,
        "chunks": ["docs"],
        "digests": {"docs": hashlib.sha1(docs.encode("utf-8")).hexdigest()},
        "documents": 1,
    }

    with pytest.raises(IndexFormatError):
        import_chunks([("docs", docs), (MANIFEST_KEY, json.dumps(manifest))])


def test_misshapen_postings_chunk_rejected(index: SearchIndex) -> None:
    postings = '{"python": [7]}'
    chunks = [c for c in export_index(index).chunks if not c[0].startswith("postings.")]
    manifest = json.loads(chunks.pop()[1])
    manifest["chunks"] = ["docs", "postings.0"]
    manifest["digests"]["postings.0"] = hashlib.sha1(postings.encode("utf-8")).hexdigest()
    chunks += [("postings.0", postings), (MANIFEST_KEY, json.dumps(manifest))]

    with pytest.raises(IndexFormatError, match="unexpected shape"):
        import_chunks(chunks)


PARITY_TEXTS = [
    "React Native是由Meta创建的开源UI软件框架",
    "Το πλαίσιο React και τα Windows",
    "애플리케이션을 개발하는 데 사용됩니다",
    "Реакт Натив: открытая платформа",
    "emoji 😀ab and 𠀀 astral ÉCOLE",
    "a b c",
]
PARITY_QUERIES = ["python", "and", "装饰器", "rust ownership", "PYTHON 进阶", "x", "", "borrowing and"]


def _run_node(tmp_path: Path, script: str) -> object:
    path = tmp_path / "harness.js"
    path.write_text(script, encoding="utf-8")
    result = subprocess.run(
        ["node", str(path)], capture_output=True, text=True, encoding="utf-8", check=True
    )
    return json.loads(result.stdout)


@requires_node
def test_browser_tokenizer_matches_python(tmp_path: Path) -> None:
    script = (
        TOKENIZER_JS
        + f"\nconsole.log(JSON.stringify({json.dumps(PARITY_TEXTS)}.map(tokenizer)));\n"
    )

    assert _run_node(tmp_path, script) == [tokenize(text) for text in PARITY_TEXTS]


@requires_node
def test_browser_search_matches_python(tmp_path: Path, index: SearchIndex) -> None:
    script = (
        "let searchFn = null;\n"
        "const window = { onsearchready: fn => { searchFn = fn; } };\n"
        + export_index(index, chunk_size=4).to_javascript()
        + f"console.log(JSON.stringify({json.dumps(PARITY_QUERIES)}"
        ".map(q => searchFn(q).map(r => r.uri))));\n"
    )

    expected = [[hit.uri for hit in index.search(q)] for q in PARITY_QUERIES]
    assert _run_node(tmp_path, script) == expected
