"""
Corpus access for document vector construction.
The build only reads per-document term frequencies, stored fields and global term weights.
"""

import json
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

TermFrequencies = List[Tuple[str, int]]


class ICorpus(ABC):
    """Abstract interface for read-only corpus access, by document ordinal."""

    @abstractmethod
    def document_count(self) -> int:
        """Number of documents; ordinals run from 0 to document_count() - 1."""
        pass

    @abstractmethod
    def document_id(self, index: int, id_field: str) -> Optional[str]:
        """Value of the document's id field, or None if the document has no such field."""
        pass

    @abstractmethod
    def term_frequencies(self, index: int, field_name: str) -> TermFrequencies:
        """(term, frequency) pairs for one field of one document; empty if none."""
        pass

    @abstractmethod
    def global_weight(self, term: str, field_name: str) -> float:
        """Corpus-level informativeness of a term in a field (>= 0, higher is more discriminative)."""
        pass


@dataclass
class CorpusDocument:
    """A document as the corpus layer hands it over."""

    stored_fields: Dict[str, str] = field(default_factory=dict)
    """Stored field values, e.g. the document path used as its id"""

    term_vectors: Dict[str, Dict[str, int]] = field(default_factory=dict)
    """field name -> term -> frequency"""


class InMemoryCorpus(ICorpus):
    """Corpus held in memory, with log-entropy global weights computed on demand."""

    def __init__(self, documents: List[CorpusDocument]):
        self.documents = documents
        self._postings: Optional[Dict[Tuple[str, str], List[int]]] = None
        self._entropy: Dict[Tuple[str, str], float] = {}

    @classmethod
    def from_jsonl(cls, path: str) -> "InMemoryCorpus":
        """Load a corpus with one JSON document per line.

        Each line looks like:
            {"fields": {"path": "a.txt"}, "terms": {"contents": {"cat": 2, "dog": 1}}}
        Either key may be omitted. Blank lines are ignored, null field values
        count as absent and integer frequencies below 1 are dropped. Anything
        else malformed raises ValueError naming the line.
        """
        documents = []
        with open(path, "r", encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    raw = json.loads(line)
                except json.JSONDecodeError as e:
                    raise ValueError(f"{path}:{line_number}: invalid JSON: {e}") from e
                documents.append(cls._parse_document(raw, f"{path}:{line_number}"))
        return cls(documents)

    @staticmethod
    def _parse_document(raw, where: str) -> CorpusDocument:
        if not isinstance(raw, dict):
            raise ValueError(f"{where}: expected a JSON object, got {type(raw).__name__}")

        fields = raw.get("fields", {})
        if not isinstance(fields, dict):
            raise ValueError(f"{where}: 'fields' must be an object")
        stored = {name: str(value) for name, value in fields.items() if value is not None}

        terms_by_field = raw.get("terms", {})
        if not isinstance(terms_by_field, dict):
            raise ValueError(f"{where}: 'terms' must be an object")

        term_vectors = {}
        for field_name, terms in terms_by_field.items():
            if not isinstance(terms, dict):
                raise ValueError(f"{where}: terms for field {field_name!r} must be an object")
            frequencies = {}
            for term, freq in terms.items():
                # bool is an int subclass but never a frequency
                if isinstance(freq, bool) or not isinstance(freq, int):
                    raise ValueError(f"{where}: frequency of {term!r} in {field_name!r} must be an integer, got {freq!r}")
                if freq >= 1:
                    frequencies[term] = freq
            term_vectors[field_name] = frequencies
        return CorpusDocument(stored_fields=stored, term_vectors=term_vectors)

    def document_count(self) -> int:
        return len(self.documents)

    def document_id(self, index: int, id_field: str) -> Optional[str]:
        return self.documents[index].stored_fields.get(id_field)

    def term_frequencies(self, index: int, field_name: str) -> TermFrequencies:
        return list(self.documents[index].term_vectors.get(field_name, {}).items())

    def _build_postings(self) -> Dict[Tuple[str, str], List[int]]:
        postings: Dict[Tuple[str, str], List[int]] = {}
        for doc in self.documents:
            for field_name, terms in doc.term_vectors.items():
                for term, freq in terms.items():
                    postings.setdefault((field_name, term), []).append(freq)
        return postings

    def global_weight(self, term: str, field_name: str) -> float:
        """Log-entropy global weight.

        g = 1 + sum_j(p_j * log2(p_j)) / log2(N), where p_j = tf_j / gf over the
        documents containing the term and gf is its total frequency in the field.
        A term spread evenly over every document scores 0; a term confined to
        one document scores 1.
        """
        key = (field_name, term)
        if key in self._entropy:
            return self._entropy[key]

        if self._postings is None:
            self._postings = self._build_postings()

        freqs = self._postings.get(key, [])
        n = len(self.documents)
        gf = sum(freqs)
        if n <= 1 or gf == 0:
            weight = 1.0
        else:
            entropy = 0.0
            for tf in freqs:
                p = tf / gf
                entropy += p * math.log2(p)
            weight = max(0.0, 1.0 + entropy / math.log2(n))

        self._entropy[key] = weight
        return weight
