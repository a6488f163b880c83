"""
Shrine Ontology - Configuration.

============================================================
CONFIGURABLE CONVERSION BEHAVIOR
============================================================

- Sensitive concept paths (exact match set)
- Ontology root label (for the version marker rename)
- Emission policy (sensitive-only vs. all rows)
- Error policy (abort on first bad row vs. skip and report)
- Modifier linking (dedupe per descendant path or per row)

Sensitive paths can be loaded from a YAML file:

    sensitive_concepts:
      - '\\SHRINE\\Diagnoses\\'
      - '\\Admit Diagnosis\\'

============================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Set, Union

import yaml

from core.constants import DEFAULT_ONTOLOGY_ROOT, PATH_DELIMITER
from core.exceptions import InvalidConfigError, SourceReadError


logger = logging.getLogger(__name__)


# =============================================================
# POLICIES
# =============================================================


class EmissionPolicy(str, Enum):
    """
    Which partitions are written to the converted ontology.

    SENSITIVE_ONLY renames the version node but never writes
    public rows.
    """
    SENSITIVE_ONLY = "sensitive_only"
    ALL = "all"


class ErrorPolicy(str, Enum):
    """What the driver does with a per-record error."""
    ABORT = "abort"
    SKIP = "skip"


# =============================================================
# ONTOLOGY CONFIG
# =============================================================


@dataclass
class OntologyConfig:
    """Configuration for one shrine ontology conversion."""

    sensitive_paths: Set[str] = field(default_factory=set)
    """Exact c_fullname values that must be redacted."""

    ontology_root: str = DEFAULT_ONTOLOGY_ROOT
    """First segment of the ONTOLOGYVERSION marker path."""

    emission_policy: EmissionPolicy = EmissionPolicy.SENSITIVE_ONLY
    error_policy: ErrorPolicy = ErrorPolicy.ABORT

    dedupe_modifier_rows: bool = True
    """Link each distinct modifier path once, not once per row."""

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        for path in sorted(self.sensitive_paths):
            if not (path.startswith(PATH_DELIMITER) and path.endswith(PATH_DELIMITER)):
                errors.append(f"sensitive path {path!r} must start and end with {PATH_DELIMITER!r}")

        if not self.ontology_root or PATH_DELIMITER in self.ontology_root:
            errors.append("ontology_root must be a single non-empty path segment")

        return errors

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OntologyConfig":
        """Build from a plain mapping (YAML section or CLI overrides)."""
        try:
            return cls(
                sensitive_paths=set(data.get("sensitive_concepts", []) or []),
                ontology_root=data.get("ontology_root", DEFAULT_ONTOLOGY_ROOT),
                emission_policy=EmissionPolicy(data.get("emission_policy", EmissionPolicy.SENSITIVE_ONLY.value)),
                error_policy=ErrorPolicy(data.get("error_policy", ErrorPolicy.ABORT.value)),
                dedupe_modifier_rows=bool(data.get("dedupe_modifier_rows", True)),
            )
        except ValueError as e:
            raise InvalidConfigError("ontology", data, str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sensitive_concepts": sorted(self.sensitive_paths),
            "ontology_root": self.ontology_root,
            "emission_policy": self.emission_policy.value,
            "error_policy": self.error_policy.value,
            "dedupe_modifier_rows": self.dedupe_modifier_rows,
        }


# =============================================================
# SENSITIVE PATH LIST
# =============================================================


def load_sensitive_paths(path: Union[str, Path]) -> Set[str]:
    """
    Load the sensitive concept list from a YAML file.

    Accepts either a bare list or a mapping with a
    `sensitive_concepts` key.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise SourceReadError(
            f"Cannot read sensitive concepts file {path.name}",
            file_name=path.name,
            file_path=str(path),
            cause=e,
        ) from e
    except yaml.YAMLError as e:
        raise InvalidConfigError("sensitive_concepts", str(path), f"invalid YAML: {e}") from e

    if isinstance(data, dict):
        data = data.get("sensitive_concepts")

    if data is None:
        data = []
    if not isinstance(data, list) or not all(isinstance(p, str) for p in data):
        raise InvalidConfigError("sensitive_concepts", str(path), "expected a list of path strings")

    paths = set(data)
    logger.info(f"Loaded {len(paths)} sensitive concept paths from {path}")
    return paths
