"""
Vector types for document vector construction.
Term vectors come from a pre-trained space; document vectors are built by superposition.
"""

from dataclasses import dataclass
from typing import Iterable

import numpy as np


class Vector:
    """Fixed-dimension real vector supporting superposition and normalization.

    Components are accumulated in float64 so that long superpositions do not
    drift; they are narrowed to float32 only when written to disk.
    """

    def __init__(self, values: np.ndarray):
        self._values = np.asarray(values, dtype=np.float64)
        if self._values.ndim != 1:
            raise ValueError(f"Vector must be one-dimensional, got shape {self._values.shape}")

    @classmethod
    def zeros(cls, dimension: int) -> "Vector":
        """Create the zero vector of the given dimension."""
        if dimension < 0:
            raise ValueError(f"Dimension must be non-negative, got {dimension}")
        return cls(np.zeros(dimension, dtype=np.float64))

    @classmethod
    def from_values(cls, values: Iterable[float]) -> "Vector":
        return cls(np.fromiter(values, dtype=np.float64))

    @property
    def dimension(self) -> int:
        return self._values.shape[0]

    @property
    def values(self) -> np.ndarray:
        """The underlying component array (not a copy)."""
        return self._values

    def superpose(self, other: "Vector", weight: float) -> None:
        """Add weight * other into this vector, element-wise."""
        if other.dimension != self.dimension:
            raise ValueError(
                f"Cannot superpose vector of dimension {other.dimension} onto dimension {self.dimension}"
            )
        self._values += weight * other.values

    def magnitude(self) -> float:
        return float(np.linalg.norm(self._values))

    def is_zero(self) -> bool:
        return not np.any(self._values)

    def normalize(self) -> None:
        """Scale to unit magnitude in place. The zero vector is left unchanged."""
        norm = np.linalg.norm(self._values)
        if norm == 0:  # Handle zero vectors to prevent division by zero
            return
        self._values /= norm

    def copy(self) -> "Vector":
        return Vector(self._values.copy())

    def __len__(self) -> int:
        return self.dimension

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return np.array_equal(self._values, other.values)

    def __repr__(self) -> str:
        return f"Vector({self._values.tolist()!r})"


@dataclass
class DocVectorRecord:
    """One persisted document vector."""

    doc_id: str
    """Document identifier, from the document-id field or the corpus ordinal"""

    vector: Vector
    """Normalized document vector"""


@dataclass
class QueryResult:
    """Represents a search result over document vectors."""

    id: str
    """Identifier of the matching document"""

    score: float
    """Cosine similarity of the match"""
