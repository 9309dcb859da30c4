"""
Document vector build configuration.
Defaults come from the environment; the build itself only ever sees a DocVectorConfig.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List

# Environment variable -> (config field, default)
ENV_DEFAULTS = {
    "DOCVECTORS_OUTPUT_PATH": ("output_path", "docvectors.bin"),
    "DOCVECTORS_DIMENSION": ("dimension", "200"),
    "DOCVECTORS_TERM_WEIGHT": ("term_weight", "termfrequency"),  # termfrequency|logentropy
    "DOCVECTORS_CONTENTS_FIELDS": ("contents_fields", "contents"),  # comma separated
    "DOCVECTORS_DOCID_FIELD": ("docid_field", "path"),
}


class ConfigurationError(Exception):
    """Raised when a build cannot start because its configuration is invalid."""
    pass


def parse_fields(value: str) -> List[str]:
    """Split a comma separated field list, dropping blanks."""
    return [name.strip() for name in value.split(",") if name.strip()]


# Converters from the raw environment string to the config field's type
_PARSERS = {
    "dimension": int,
    "contents_fields": parse_fields,
}


def _parse(field_name: str, raw: str):
    return _PARSERS.get(field_name, str)(raw)


def _default(env_name: str):
    field_name, raw = ENV_DEFAULTS[env_name]
    return _parse(field_name, raw)


@dataclass
class DocVectorConfig:
    """Effective options for one document vector build."""

    output_path: str = _default("DOCVECTORS_OUTPUT_PATH")
    dimension: int = _default("DOCVECTORS_DIMENSION")
    term_weight: str = _default("DOCVECTORS_TERM_WEIGHT")
    contents_fields: List[str] = field(default_factory=lambda: _default("DOCVECTORS_CONTENTS_FIELDS"))
    docid_field: str = _default("DOCVECTORS_DOCID_FIELD")


def load_config(**overrides) -> DocVectorConfig:
    """Build a config from the current environment, then apply explicit overrides.

    Overrides whose value is None are ignored so that unset command-line
    options fall through to the environment.
    """
    values = {}
    for env_name, (field_name, default) in ENV_DEFAULTS.items():
        values[field_name] = _parse(field_name, os.getenv(env_name, default))
    config = DocVectorConfig(**values)
    applied = {key: value for key, value in overrides.items() if value is not None}
    return replace(config, **applied)


def default_output_path(term_vector_file: str) -> str:
    """Name document vectors after the term vector file they were built from."""
    return term_vector_file.replace(".bin", "") + "_docvectors.bin"


def validate_config(config: DocVectorConfig) -> List[str]:
    """Validate build configuration and return any issues."""
    issues = []

    if config.dimension <= 0:
        issues.append(f"dimension must be > 0, got {config.dimension}")

    if not config.contents_fields:
        issues.append("contents_fields must name at least one field")

    if not config.output_path:
        issues.append("output_path must be set")
    else:
        parent = Path(config.output_path).resolve().parent
        if not parent.is_dir():
            issues.append(f"output directory does not exist: {parent}")
        elif not os.access(parent, os.W_OK):
            issues.append(f"output directory is not writable: {parent}")
        elif Path(config.output_path).is_dir():
            issues.append(f"output path is a directory: {config.output_path}")

    return issues
