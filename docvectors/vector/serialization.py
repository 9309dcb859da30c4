"""
Binary vector file protocol.
Shared by document vector output and pre-trained term vector input.

File layout:

    string  "-dimensions"
    int32   dimension
    then, once per entry, in write order:
    string  identifier (document id or term)
    float32 x dimension

Encodings:

    string  unsigned length prefix of the UTF-8 byte count, 7 bits per byte,
            low-order group first, high bit set when more bytes follow;
            then the UTF-8 bytes
    int32   4 bytes, big-endian, two's complement
    float32 4 bytes each, big-endian IEEE 754

Readers must treat the header as mandatory; the dimension is fixed for every
entry that follows.
"""

import os
import struct
from typing import BinaryIO, Iterator, List, Optional, Tuple

import numpy as np

from .types import DocVectorRecord, Vector

DIMENSIONS_MARKER = "-dimensions"

_INT32 = struct.Struct(">i")
_FLOAT32 = np.dtype(">f4")


class DocVectorFormatError(Exception):
    """Raised when a vector file is missing its header or is truncated."""
    pass


class BinaryOutputStream:
    """Primitive writers for the vector file protocol over a byte stream."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream

    def write_vint(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"Variable-length ints must be non-negative, got {value}")
        encoded = bytearray()
        while value >= 0x80:
            encoded.append((value & 0x7F) | 0x80)
            value >>= 7
        encoded.append(value)
        self._stream.write(bytes(encoded))

    def write_string(self, value: str) -> None:
        data = value.encode("utf-8")
        self.write_vint(len(data))
        self._stream.write(data)

    def write_int32(self, value: int) -> None:
        self._stream.write(_INT32.pack(value))

    def write_float32_array(self, values: np.ndarray) -> None:
        self._stream.write(np.asarray(values).astype(_FLOAT32).tobytes())

    def flush(self) -> None:
        self._stream.flush()


class BinaryInputStream:
    """Primitive readers matching BinaryOutputStream."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream

    def _read_exact(self, count: int) -> bytes:
        data = self._stream.read(count)
        if len(data) != count:
            raise DocVectorFormatError(f"Unexpected end of file: wanted {count} bytes, got {len(data)}")
        return data

    def read_vint(self) -> int:
        value = 0
        shift = 0
        while True:
            byte = self._read_exact(1)[0]
            value |= (byte & 0x7F) << shift
            if byte < 0x80:
                return value
            shift += 7

    def read_string(self) -> str:
        length = self.read_vint()
        data = self._read_exact(length)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DocVectorFormatError(f"Invalid UTF-8 in string field: {e}") from e

    def read_int32(self) -> int:
        return _INT32.unpack(self._read_exact(_INT32.size))[0]

    def read_float32_array(self, count: int) -> np.ndarray:
        data = self._read_exact(count * _FLOAT32.itemsize)
        return np.frombuffer(data, dtype=_FLOAT32).astype(np.float64)

    def at_eof(self) -> bool:
        position = self._stream.tell()
        at_end = not self._stream.read(1)
        self._stream.seek(position)
        return at_end


class DocVectorWriter:
    """Streams a header and one record per document to a vector file.

    Use as a context manager: the file is closed on success, and on any
    exception it is closed and deleted so an incomplete file is never left
    behind looking complete.
    """

    def __init__(self, path: str):
        self.path = path
        self.dimension: Optional[int] = None
        self.records_written = 0
        self._file: Optional[BinaryIO] = None
        self._out: Optional[BinaryOutputStream] = None

    def open(self) -> "DocVectorWriter":
        """Create or truncate the target file."""
        self._file = open(self.path, "wb")
        self._out = BinaryOutputStream(self._file)
        self.dimension = None
        self.records_written = 0
        return self

    def write_header(self, dimension: int) -> None:
        if self._out is None:
            raise ValueError("Writer is not open")
        if self.dimension is not None:
            raise ValueError("Header already written")
        if dimension <= 0:
            raise ValueError(f"Dimension must be positive, got {dimension}")
        self._out.write_string(DIMENSIONS_MARKER)
        self._out.write_int32(dimension)
        self.dimension = dimension

    def write_record(self, doc_id: str, vector: Vector) -> None:
        if self._out is None:
            raise ValueError("Writer is not open")
        if self.dimension is None:
            raise ValueError("Header must be written before records")
        if vector.dimension != self.dimension:
            raise ValueError(
                f"Vector dimension {vector.dimension} does not match file dimension {self.dimension}"
            )
        self._out.write_string(doc_id)
        self._out.write_float32_array(vector.values)
        self.records_written += 1

    def close(self) -> None:
        """Flush and release the file handle."""
        if self._file is None:
            return
        try:
            self._file.flush()
        finally:
            self._file.close()
            self._file = None
            self._out = None

    def abort(self) -> None:
        """Release the file handle and delete the incomplete file."""
        if self._file is not None:
            try:
                self._file.close()
            except OSError:
                # The failure that triggered the abort is the one to report
                pass
            self._file = None
            self._out = None
        try:
            if os.path.exists(self.path):
                os.remove(self.path)
        except OSError:
            # Same precedence as above; a leftover file is still incomplete
            pass

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_value, exc_traceback):
        if exc_type is None:
            self.close()
        else:
            self.abort()
        return False


class DocVectorReader:
    """Reads a vector file back as a stream of DocVectorRecord.

    The dimension is available once the reader is opened:

        with DocVectorReader(path) as reader:
            for record in reader:
                ...
    """

    def __init__(self, path: str):
        self.path = path
        self.dimension: Optional[int] = None
        self._file: Optional[BinaryIO] = None
        self._in: Optional[BinaryInputStream] = None

    def open(self) -> "DocVectorReader":
        self._file = open(self.path, "rb")
        self._in = BinaryInputStream(self._file)
        try:
            self.dimension = self._read_header()
        except DocVectorFormatError:
            self.close()
            raise
        return self

    def _read_header(self) -> int:
        try:
            marker = self._in.read_string()
        except DocVectorFormatError as e:
            raise DocVectorFormatError(f"{self.path}: missing vector file header") from e
        if marker != DIMENSIONS_MARKER:
            raise DocVectorFormatError(f"{self.path}: expected header {DIMENSIONS_MARKER!r}, found {marker!r}")
        dimension = self._in.read_int32()
        if dimension <= 0:
            raise DocVectorFormatError(f"{self.path}: invalid dimension {dimension} in header")
        return dimension

    def __iter__(self) -> Iterator[DocVectorRecord]:
        if self._in is None:
            raise ValueError("Reader is not open")
        while not self._in.at_eof():
            doc_id = self._in.read_string()
            values = self._in.read_float32_array(self.dimension)
            yield DocVectorRecord(doc_id=doc_id, vector=Vector(values))

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            self._in = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_value, exc_traceback):
        self.close()
        return False


def read_doc_vectors(path: str) -> Tuple[int, List[DocVectorRecord]]:
    """Read a whole vector file into memory. Returns (dimension, records)."""
    with DocVectorReader(path) as reader:
        records = list(reader)
        return reader.dimension, records
