"""
Structured logging for document vector builds.
Progress and warnings only; nothing logged here affects what is written.
"""

import logging
from typing import Any, Dict, List


class StructuredLogger:
    """Structured logger for document vector build operations."""

    def __init__(self, name: str = "docvectors"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None, level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.log(level, message)

    def log_build_started(self, output_path: str, dimension: int, term_weight: str, fields: List[str], document_count: int):
        """Log the start of a document vector build."""
        self.log_operation("build", "started", {
            "output_path": output_path,
            "dimension": dimension,
            "term_weight": term_weight,
            "fields": fields,
            "document_count": document_count
        })

    def log_document_progress(self, processed: int):
        """Log a progress milestone."""
        self.log_operation("build.progress", "running", {"processed": processed})

    def log_empty_document_id(self, ordinal: int, docid_field: str):
        """Log a document whose id field is present but empty."""
        self.log_operation("build.document_id", "empty", {
            "ordinal": ordinal,
            "docid_field": docid_field,
            "message": f"Empty document name. Set the '{docid_field}' field to a non-empty value in the corpus."
        }, level=logging.WARNING)

    def log_unknown_term_weight(self, term_weight: str, fallback: str):
        """Log an unrecognized weighting scheme name."""
        self.log_operation("weighting", "unknown_scheme", {
            "term_weight": term_weight,
            "fallback": fallback
        }, level=logging.WARNING)

    def log_build_finished(self, output_path: str, documents: int, contributions: int, skipped: int):
        """Log completion of a document vector build."""
        self.log_operation("build", "finished", {
            "output_path": output_path,
            "documents": documents,
            "contributions": contributions,
            "skipped_terms": skipped
        })

    def log_build_failed(self, output_path: str, documents: int, error: Exception):
        """Log a build aborted partway through."""
        self.log_operation("build", "failed", {
            "output_path": output_path,
            "documents_processed": documents,
            "error": str(error)[:200],
            "partial_output_removed": True
        }, level=logging.ERROR)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)

# Global logger instance
logger = StructuredLogger()
