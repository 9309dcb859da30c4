"""
Per-document vector accumulation.
One accumulator holds exactly one in-flight document; nothing carries over between documents.
"""

from enum import Enum
from typing import Optional

from ..vector.types import Vector


class AccumulatorState(Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    FINISHED = "finished"


class AccumulatorStateError(Exception):
    """Raised when the accumulator is driven out of order."""
    pass


class DocumentAccumulator:
    """Folds weighted term vectors into a single running document vector.

    IDLE -> begin_document -> ACCUMULATING -> contribute* -> finish -> FINISHED

    A FINISHED accumulator may begin a new document. Beginning a document
    while another is still accumulating is an error.
    """

    def __init__(self):
        self.state = AccumulatorState.IDLE
        self.dimension = 0
        self.contributions = 0
        self.skipped = 0
        self._vector: Optional[Vector] = None

    def begin_document(self, dimension: int) -> Vector:
        if self.state == AccumulatorState.ACCUMULATING:
            raise AccumulatorStateError("Previous document has not been finished")
        self.dimension = dimension
        self._vector = Vector.zeros(dimension)
        self.state = AccumulatorState.ACCUMULATING
        return self._vector

    def contribute(self, term_vector: Optional[Vector], weight: float) -> bool:
        """Superpose weight * term_vector into the document vector.

        Terms outside the vocabulary (None) and vectors with zero or
        mismatched dimension are skipped. Returns whether the term contributed.
        """
        if self.state != AccumulatorState.ACCUMULATING:
            raise AccumulatorStateError(f"Cannot contribute while {self.state.value}")
        if term_vector is None or term_vector.dimension == 0 or term_vector.dimension != self.dimension:
            self.skipped += 1
            return False
        self._vector.superpose(term_vector, weight)
        self.contributions += 1
        return True

    def finish(self) -> Vector:
        """Normalize and hand over the document vector."""
        if self.state != AccumulatorState.ACCUMULATING:
            raise AccumulatorStateError(f"Cannot finish while {self.state.value}")
        vector = self._vector
        vector.normalize()
        self._vector = None
        self.state = AccumulatorState.FINISHED
        return vector
