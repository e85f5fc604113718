from __future__ import annotations

import importlib.util
import json
import pathlib

import pytest

from schemaless.services.collections import CollectionValidator
from schemaless.services.indexing_service import IndexingService
from schemaless.services.search_service import SearchService

SCRIPTS_DIR = pathlib.Path(__file__).resolve().parents[1] / "scripts"


def _load_script(name):
    spec = importlib.util.spec_from_file_location(name, str(SCRIPTS_DIR / f"{name}.py"))
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)  # type: ignore
    return module


@pytest.fixture
def index_file(monkeypatch, store):
    module = _load_script("index_file")
    monkeypatch.setattr(
        module,
        "IndexingService",
        lambda batch_size=None: IndexingService(store=store, validator=CollectionValidator(()), batch_size=batch_size),
    )
    return module


def test_index_file_detects_format(index_file, store, tmp_path, capsys):
    path = tmp_path / "books.csv"
    path.write_text("id,title\n1,A\n2,B\n", encoding="utf-8")
    assert index_file.main([str(path), "--collection", "books", "--batch-size", "1"]) == 0
    assert capsys.readouterr().out.strip() == "Indexed: 2"
    assert len(store.batch_calls) == 2
    assert store.commits == ["books"]


def test_index_file_explicit_format(index_file, store, tmp_path, capsys):
    path = tmp_path / "export.txt"
    path.write_text("<root><doc><id>1</id></doc></root>", encoding="utf-8")
    assert index_file.main([str(path), "-c", "books", "-f", "xml"]) == 0
    assert store.batch_calls == [[{"id": 1}]]


def test_index_file_reports_errors(index_file, store, tmp_path, capsys):
    assert index_file.main([str(tmp_path / "missing.json"), "-c", "books"]) == 1
    bad = tmp_path / "bad.json"
    bad.write_text("[{", encoding="utf-8")
    assert index_file.main([str(bad), "-c", "books"]) == 1
    assert "Indexing failed" in capsys.readouterr().err
    assert store.commits == []


def test_search_collection_prints_json(monkeypatch, store, capsys):
    module = _load_script("search_collection")
    monkeypatch.setattr(module, "SearchService", lambda: SearchService(store=store, validator=CollectionValidator(())))
    store.response = {"hits": {"total": {"value": 1}, "hits": [{"_id": "1", "_source": {"title": "Dune"}}]}}

    assert module.main(["-c", "books", "-q", "title:dune", "--fq", "genre:scifi", "--sort", "year:desc"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["documents"] == [{"title": "Dune", "id": "1"}]
    body = store.queries[0]["body"]
    assert body["sort"] == [{"year": {"order": "desc"}}]
    assert body["query"]["bool"]["filter"] == [{"query_string": {"query": "genre:scifi"}}]
