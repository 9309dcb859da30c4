"""
Vector layer for document vector construction: vector arithmetic, term vector
lookup, the binary vector file protocol and similarity search over results.
"""

# Package initialization for vector module
from .types import Vector, DocVectorRecord, QueryResult
from .index import ITermVectorLookup, InMemoryTermVectorStore
from .serialization import (
    DIMENSIONS_MARKER,
    BinaryInputStream,
    BinaryOutputStream,
    DocVectorFormatError,
    DocVectorReader,
    DocVectorWriter,
    read_doc_vectors,
)
from .faiss_store import FaissDocVectorIndex

__all__ = [
    'Vector',
    'DocVectorRecord',
    'QueryResult',
    'ITermVectorLookup',
    'InMemoryTermVectorStore',
    'DIMENSIONS_MARKER',
    'BinaryInputStream',
    'BinaryOutputStream',
    'DocVectorFormatError',
    'DocVectorReader',
    'DocVectorWriter',
    'read_doc_vectors',
    'FaissDocVectorIndex',
]
