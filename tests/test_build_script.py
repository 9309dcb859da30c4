"""
Test cases for the build_doc_vectors command-line utility.
"""

import json

import numpy as np
import pytest
from scripts.build_doc_vectors import main
from docvectors.vector.serialization import DocVectorWriter, read_doc_vectors
from docvectors.vector.types import Vector


@pytest.fixture
def inputs(tmp_path):
    """A dimension 4 term vector file and a three document corpus."""
    term_file = tmp_path / "termvectors.bin"
    with DocVectorWriter(str(term_file)) as writer:
        writer.write_header(4)
        writer.write_record("a", Vector.from_values([1.0, 0.0, 0.0, 0.0]))
        writer.write_record("b", Vector.from_values([0.0, 1.0, 0.0, 0.0]))

    corpus_file = tmp_path / "corpus.jsonl"
    docs = [
        {"fields": {"path": "doc1"}, "terms": {"contents": {"a": 2}}},
        {"fields": {"path": "doc2"}, "terms": {"contents": {"a": 1, "b": 1}}},
        {"fields": {"path": "doc3"}},
    ]
    corpus_file.write_text("\n".join(json.dumps(d) for d in docs), encoding="utf-8")

    return term_file, corpus_file


def test_build_script_successful(capfd, inputs, monkeypatch):
    """The script derives the output name and writes one record per document."""
    monkeypatch.delenv("DOCVECTORS_OUTPUT_PATH", raising=False)
    term_file, corpus_file = inputs

    summary = main([str(term_file), str(corpus_file)])

    captured = capfd.readouterr()
    assert "Loaded 2 term vectors of dimension 4" in captured.out
    assert "Found 3 documents in corpus" in captured.out
    assert "✓ Wrote 3 document vectors" in captured.out

    expected_output = str(term_file).replace(".bin", "") + "_docvectors.bin"
    assert summary.output_path == expected_output

    dimension, records = read_doc_vectors(expected_output)
    assert dimension == 4
    assert [r.doc_id for r in records] == ["doc1", "doc2", "doc3"]
    np.testing.assert_allclose(records[1].vector.values, [0.70710677, 0.70710677, 0.0, 0.0], atol=1e-6)


def test_build_script_options(tmp_path, inputs):
    """Command-line options override the defaults."""
    term_file, corpus_file = inputs
    output = tmp_path / "out.bin"

    summary = main([
        str(term_file), str(corpus_file),
        "--output", str(output),
        "--termweight", "logentropy",
        "--contentsfields", "contents,title",
        "--docidfield", "url",
    ])

    assert summary.output_path == str(output)
    _, records = read_doc_vectors(str(output))
    assert [r.doc_id for r in records] == ["0", "1", "2"]


def test_build_script_dimension_mismatch(capfd, inputs):
    """A dimension that disagrees with the term vectors exits with an error."""
    term_file, corpus_file = inputs

    with pytest.raises(SystemExit) as exc_info:
        main([str(term_file), str(corpus_file), "--dimension", "8"])

    assert exc_info.value.code == 1
    captured = capfd.readouterr()
    assert "ERROR:" in captured.out
    assert "dimension" in captured.out


def test_build_script_bad_term_vector_file(capfd, tmp_path, inputs):
    """An unreadable term vector file exits with an error."""
    _, corpus_file = inputs
    bad = tmp_path / "bad.bin"
    bad.write_bytes(b"\x02no")

    with pytest.raises(SystemExit) as exc_info:
        main([str(bad), str(corpus_file)])

    assert exc_info.value.code == 1
    assert "Failed to load term vectors" in capfd.readouterr().out


def test_build_script_malformed_corpus(capfd, tmp_path, inputs):
    """A corpus line of the wrong shape exits with an error line, not a traceback."""
    term_file, _ = inputs
    corpus_file = tmp_path / "bad.jsonl"
    corpus_file.write_text("[1, 2]\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main([str(term_file), str(corpus_file)])

    assert exc_info.value.code == 1
    assert "ERROR: Failed to load corpus" in capfd.readouterr().out
