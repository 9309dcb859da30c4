"""
Incremental document vector build.
Streams the corpus one document at a time: weight each term, superpose its vector,
normalize, and write one record per document in corpus order.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from util.logging import logger

from ..vector.index import ITermVectorLookup
from ..vector.serialization import DocVectorWriter
from .accumulator import DocumentAccumulator
from .config import ConfigurationError, DocVectorConfig, validate_config
from .corpus import ICorpus
from .weighting import WeightingScheme

ProgressCallback = Callable[[int], None]


@dataclass
class BuildSummary:
    """Outcome of a completed build."""
    output_path: str
    dimension: int
    documents: int = 0
    contributions: int = 0
    skipped: int = 0


def is_progress_milestone(processed: int) -> bool:
    """Every 10,000 documents up to 50,000, then every 50,000."""
    if processed <= 0:
        return False
    return processed % 50000 == 0 or (processed < 50000 and processed % 10000 == 0)


def resolve_document_id(corpus: ICorpus, index: int, docid_field: str) -> str:
    """
    Pick the identifier written for a document.

    Uses the document-id field verbatim when present. An empty value is a
    corpus metadata problem: it is logged and used anyway. Documents without
    the field fall back to their ordinal.
    """
    doc_id = corpus.document_id(index, docid_field)
    if doc_id is None:
        return str(index)
    if doc_id == "":
        logger.log_empty_document_id(index, docid_field)
    return doc_id


def _check_config(config: DocVectorConfig, term_vectors: ITermVectorLookup) -> None:
    issues = validate_config(config)
    if not issues and term_vectors.get_dimension() != config.dimension:
        issues.append(
            f"term vectors have dimension {term_vectors.get_dimension()}, "
            f"but dimension {config.dimension} was requested"
        )
    if issues:
        raise ConfigurationError("; ".join(issues))


def build_document_vectors(
    config: DocVectorConfig,
    term_vectors: ITermVectorLookup,
    corpus: ICorpus,
    progress: Optional[ProgressCallback] = None,
) -> BuildSummary:
    """
    Build and write one normalized document vector per corpus document.

    Args:
        config: Output path, dimension, weighting scheme, fields and id field
        term_vectors: Pre-trained term vector space
        corpus: Source of per-document term frequencies
        progress: Called with the number of processed documents at milestones

    Returns:
        BuildSummary: Counts for the completed build

    Raises:
        ConfigurationError: Before any document is processed, if the build cannot start
        OSError: If writing fails; the partial output file is removed first
    """
    _check_config(config, term_vectors)

    if progress is None:
        progress = logger.log_document_progress

    weighting = WeightingScheme(config.term_weight, corpus.global_weight)
    summary = BuildSummary(output_path=config.output_path, dimension=config.dimension)
    document_count = corpus.document_count()

    logger.log_build_started(
        config.output_path, config.dimension, weighting.name, config.contents_fields, document_count
    )

    try:
        writer = DocVectorWriter(config.output_path).open()
    except OSError as e:
        raise ConfigurationError(f"cannot open output file {config.output_path}: {e}") from e

    try:
        writer.write_header(config.dimension)

        for index in range(document_count):
            doc_id = resolve_document_id(corpus, index, config.docid_field)

            accumulator = DocumentAccumulator()
            accumulator.begin_document(config.dimension)

            for field_name in config.contents_fields:
                for term, frequency in corpus.term_frequencies(index, field_name) or []:
                    if frequency < 1:
                        continue
                    weight = weighting.weight(term, field_name, frequency)
                    accumulator.contribute(term_vectors.get_vector(term), weight)

            # All fields in the document have been processed
            writer.write_record(doc_id, accumulator.finish())

            summary.documents += 1
            summary.contributions += accumulator.contributions
            summary.skipped += accumulator.skipped

            if is_progress_milestone(summary.documents):
                progress(summary.documents)

        writer.close()
    except BaseException as e:
        writer.abort()
        logger.log_build_failed(config.output_path, summary.documents, e)
        raise

    logger.log_build_finished(config.output_path, summary.documents, summary.contributions, summary.skipped)
    return summary
