"""
Term vector lookup - read-only access to a pre-trained term vector space.
A term outside the trained vocabulary is a normal outcome (None), not an error.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterator, Optional

from .serialization import DocVectorReader
from .types import Vector


class ITermVectorLookup(ABC):
    """Abstract interface for term vector lookup."""

    @abstractmethod
    def get_vector(self, term: str) -> Optional[Vector]:
        """Return the vector for a term, or None if the term is not in the space."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the term vectors."""
        pass


class InMemoryTermVectorStore(ITermVectorLookup):
    """Dict-backed term vector space held entirely in memory."""

    def __init__(self, dimension: int):
        self.dimension = dimension
        self._vectors: Dict[str, Vector] = {}

    @classmethod
    def from_file(cls, path: str) -> "InMemoryTermVectorStore":
        """Load a term vector file written in the vector file protocol."""
        with DocVectorReader(path) as reader:
            store = cls(reader.dimension)
            for record in reader:
                store.add(record.doc_id, record.vector)
        return store

    def add(self, term: str, vector: Vector) -> None:
        """Add or replace the vector for a term."""
        if vector.dimension != self.dimension:
            raise ValueError(f"Vector dimension {vector.dimension} does not match expected dimension {self.dimension}")
        self._vectors[term] = vector

    def get_vector(self, term: str) -> Optional[Vector]:
        return self._vectors.get(term)

    def get_dimension(self) -> int:
        return self.dimension

    def terms(self) -> Iterator[str]:
        return iter(self._vectors)

    def __contains__(self, term) -> bool:
        return term in self._vectors

    def __len__(self) -> int:
        return len(self._vectors)
