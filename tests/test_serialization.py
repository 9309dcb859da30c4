"""
Test cases for the binary vector file protocol.
"""

import io
import struct
from unittest.mock import patch

import numpy as np
import pytest
from docvectors.vector.serialization import (
    BinaryInputStream,
    BinaryOutputStream,
    DocVectorFormatError,
    DocVectorReader,
    DocVectorWriter,
    read_doc_vectors,
)
from docvectors.vector.types import Vector


def test_header_byte_layout(tmp_path):
    """The header is a length-prefixed marker followed by a big-endian int32."""
    path = tmp_path / "docvectors.bin"

    with DocVectorWriter(str(path)) as writer:
        writer.write_header(4)

    assert path.read_bytes() == b"\x0b-dimensions" + b"\x00\x00\x00\x04"


def test_record_byte_layout(tmp_path):
    """A record is a length-prefixed id followed by big-endian float32 components."""
    path = tmp_path / "docvectors.bin"

    with DocVectorWriter(str(path)) as writer:
        writer.write_header(2)
        writer.write_record("d1", Vector.from_values([1.0, -0.5]))

    data = path.read_bytes()
    record = data[len(b"\x0b-dimensions") + 4:]
    assert record == b"\x02d1" + struct.pack(">ff", 1.0, -0.5)


def test_round_trip_preserves_order_and_ids(tmp_path):
    """Writing then reading yields the same ids, order and components."""
    path = tmp_path / "docvectors.bin"
    rng = np.random.default_rng(7)
    written = [(f"doc-{i}", Vector(rng.normal(size=8))) for i in range(5)]
    written.append(("", Vector.zeros(8)))
    written.append(("répertoire/ファイル.txt", Vector(rng.normal(size=8))))

    with DocVectorWriter(str(path)) as writer:
        writer.write_header(8)
        for doc_id, vector in written:
            writer.write_record(doc_id, vector)
        assert writer.records_written == len(written)

    dimension, records = read_doc_vectors(str(path))

    assert dimension == 8
    assert [r.doc_id for r in records] == [doc_id for doc_id, _ in written]
    for record, (_, vector) in zip(records, written):
        np.testing.assert_allclose(record.vector.values, vector.values, rtol=1e-6, atol=1e-7)


def test_long_identifier_uses_multibyte_length(tmp_path):
    """Identifiers longer than 127 bytes get a multi-byte length prefix."""
    path = tmp_path / "docvectors.bin"
    doc_id = "x" * 300

    with DocVectorWriter(str(path)) as writer:
        writer.write_header(1)
        writer.write_record(doc_id, Vector.from_values([1.0]))

    data = path.read_bytes()
    assert data[16:18] == bytes([0xAC, 0x02])  # 300 = 0b10_0101100

    _, records = read_doc_vectors(str(path))
    assert records[0].doc_id == doc_id


def test_vint_round_trip_on_boundaries():
    """Variable-length ints decode to the value that was encoded."""
    buffer = io.BytesIO()
    out = BinaryOutputStream(buffer)
    values = [0, 1, 127, 128, 16383, 16384, 2 ** 31 - 1]
    for value in values:
        out.write_vint(value)

    buffer.seek(0)
    reader = BinaryInputStream(buffer)

    assert [reader.read_vint() for _ in values] == values
    assert reader.at_eof()


def test_record_dimension_must_match_header(tmp_path):
    """A vector with the wrong dimension is refused."""
    path = tmp_path / "docvectors.bin"
    writer = DocVectorWriter(str(path)).open()
    writer.write_header(3)

    with pytest.raises(ValueError):
        writer.write_record("d1", Vector.zeros(2))

    writer.close()


def test_record_before_header_is_refused(tmp_path):
    """Records cannot be written before the header."""
    writer = DocVectorWriter(str(tmp_path / "docvectors.bin")).open()

    with pytest.raises(ValueError):
        writer.write_record("d1", Vector.zeros(2))

    writer.close()


def test_failure_inside_context_removes_partial_file(tmp_path):
    """An exception during writing deletes the incomplete output."""
    path = tmp_path / "docvectors.bin"

    with pytest.raises(RuntimeError):
        with DocVectorWriter(str(path)) as writer:
            writer.write_header(2)
            writer.write_record("d1", Vector.from_values([1.0, 0.0]))
            raise RuntimeError("disk went away")

    assert not path.exists()


def test_open_truncates_existing_file(tmp_path):
    """Opening a writer replaces any previous contents."""
    path = tmp_path / "docvectors.bin"
    path.write_bytes(b"stale contents" * 100)

    with DocVectorWriter(str(path)) as writer:
        writer.write_header(1)

    assert len(path.read_bytes()) == 16


def test_missing_header_is_rejected(tmp_path):
    """A file without the dimensions header cannot be read."""
    path = tmp_path / "garbage.bin"
    path.write_bytes(b"\x05hello" + b"\x00\x00\x00\x01")

    with pytest.raises(DocVectorFormatError):
        read_doc_vectors(str(path))


def test_empty_file_is_rejected(tmp_path):
    """An empty file has no header."""
    path = tmp_path / "empty.bin"
    path.write_bytes(b"")

    with pytest.raises(DocVectorFormatError):
        DocVectorReader(str(path)).open()


def test_truncated_record_is_rejected(tmp_path):
    """A record cut short raises a format error instead of returning garbage."""
    path = tmp_path / "docvectors.bin"
    with DocVectorWriter(str(path)) as writer:
        writer.write_header(4)
        writer.write_record("d1", Vector.from_values([1.0, 0.0, 0.0, 0.0]))

    path.write_bytes(path.read_bytes()[:-3])

    with pytest.raises(DocVectorFormatError):
        read_doc_vectors(str(path))


def test_abort_keeps_original_error_when_removal_fails(tmp_path):
    """If the partial file cannot be deleted, the write failure still surfaces."""
    path = tmp_path / "docvectors.bin"

    with patch("docvectors.vector.serialization.os.remove", side_effect=PermissionError("read-only")):
        with pytest.raises(RuntimeError, match="disk went away"):
            with DocVectorWriter(str(path)) as writer:
                writer.write_header(2)
                raise RuntimeError("disk went away")

    assert writer._file is None
