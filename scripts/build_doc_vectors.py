#!/usr/bin/env python3
"""
Document Vector Build Utility
Builds one normalized document vector per corpus document from a pre-trained
term vector file and a JSON-lines corpus of term frequencies.
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from docvectors.core.builder import build_document_vectors
from docvectors.core.config import ConfigurationError, default_output_path, load_config, parse_fields
from docvectors.core.corpus import InMemoryCorpus
from docvectors.vector.index import InMemoryTermVectorStore
from docvectors.vector.serialization import DocVectorFormatError


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Build document vectors from term vectors and a corpus")
    parser.add_argument("term_vectors", help="Binary term vector file")
    parser.add_argument("corpus", help="JSON-lines corpus of per-document term frequencies")
    parser.add_argument("--output", help="Document vector file (default: <term_vectors>_docvectors.bin)")
    parser.add_argument("--dimension", type=int, help="Vector dimension (default: the term vector file's)")
    parser.add_argument("--termweight", help="Weighting scheme: termfrequency|logentropy")
    parser.add_argument("--contentsfields", help="Comma separated fields to index")
    parser.add_argument("--docidfield", help="Stored field holding document ids")
    return parser.parse_args(argv)


def main(argv=None):
    """Build document vectors and write them to disk."""
    args = parse_args(argv)

    try:
        term_vectors = InMemoryTermVectorStore.from_file(args.term_vectors)
    except (OSError, DocVectorFormatError) as e:
        print(f"ERROR: Failed to load term vectors from {args.term_vectors}: {e}")
        sys.exit(1)
    print(f"Loaded {len(term_vectors)} term vectors of dimension {term_vectors.get_dimension()}")

    try:
        corpus = InMemoryCorpus.from_jsonl(args.corpus)
    except (OSError, ValueError) as e:
        print(f"ERROR: Failed to load corpus from {args.corpus}: {e}")
        sys.exit(1)
    print(f"Found {corpus.document_count()} documents in corpus")

    config = load_config(
        output_path=args.output or default_output_path(args.term_vectors),
        dimension=args.dimension if args.dimension is not None else term_vectors.get_dimension(),
        term_weight=args.termweight,
        contents_fields=parse_fields(args.contentsfields) if args.contentsfields else None,
        docid_field=args.docidfield,
    )
    print(f"Contents fields are: {config.contents_fields}")

    def report(processed):
        print(f"  ... processed {processed}/{corpus.document_count()} documents")

    try:
        summary = build_document_vectors(config, term_vectors, corpus, progress=report)
    except ConfigurationError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"✓ Wrote {summary.documents} document vectors to {summary.output_path}")
    return summary


if __name__ == "__main__":
    main()
