"""
Similarity search over built document vectors.
Loads a document vector file into a FAISS inner-product index.
"""

from typing import List

import numpy as np

from .serialization import DocVectorReader
from .types import DocVectorRecord, QueryResult, Vector


class FaissDocVectorIndex:
    """FAISS-backed nearest-neighbour index over document vectors."""

    def __init__(self, dimension: int):
        """
        Initialize FAISS document vector index.

        Args:
            dimension: Dimension of the document vectors
        """
        try:
            import faiss
            self.faiss = faiss
        except ImportError:
            raise ImportError("FAISS not installed. Please install faiss-cpu package.")

        self.dimension = dimension

        # Inner product over unit vectors is cosine similarity
        self.index = faiss.IndexFlatIP(dimension)

        # FAISS row -> document id
        self.doc_ids: List[str] = []

    @classmethod
    def from_file(cls, path: str) -> "FaissDocVectorIndex":
        """Build an index from a document vector file."""
        with DocVectorReader(path) as reader:
            store = cls(reader.dimension)
            store.batch_add(list(reader))
        return store

    def _prepare(self, vector: Vector):
        if vector.dimension != self.dimension:
            raise ValueError(f"Vector dimension {vector.dimension} does not match expected dimension {self.dimension}")

        norm = np.linalg.norm(vector.values)
        if norm == 0:  # Documents without any known terms have no direction
            return None

        return np.array(vector.values / norm, dtype=np.float32)

    def add(self, record: DocVectorRecord) -> None:
        """Add a single document vector to the index."""
        self.batch_add([record])

    def batch_add(self, records: List[DocVectorRecord]) -> None:
        """Add multiple document vectors to the index."""
        vectors_to_add = []
        ids_to_add = []

        for record in records:
            prepared = self._prepare(record.vector)
            if prepared is None:
                continue
            vectors_to_add.append(prepared)
            ids_to_add.append(record.doc_id)

        if not vectors_to_add:
            return

        self.index.add(np.vstack(vectors_to_add).astype(np.float32))
        self.doc_ids.extend(ids_to_add)

    def search(self, query_vector: Vector, top_k: int = 5) -> List[QueryResult]:
        """Search for the documents most similar to a query vector."""
        if not self.index.ntotal:
            return []

        query_array = self._prepare(query_vector)
        if query_array is None:
            return []

        scores, indices = self.index.search(query_array.reshape(1, -1), min(top_k, self.index.ntotal))

        query_results = []
        for score, row in zip(scores[0], indices[0]):
            if row < 0:
                continue
            query_results.append(QueryResult(id=self.doc_ids[row], score=float(score)))

        return query_results

    def clear(self) -> None:
        """Clear all document vectors from the index."""
        self.index = self.faiss.IndexFlatIP(self.dimension)
        self.doc_ids = []

    def __len__(self) -> int:
        return self.index.ntotal
