"""
Core Module - Loader Configuration.

============================================================
CONFIGURATION SOURCES
============================================================
Configuration can be loaded from:
- Default values (data/original -> data/converted)
- Environment variables (a .env file is honored)
- YAML config file

Environment variables:
- LOADER_ADAPTER_MAPPINGS_INPUT / _OUTPUT
- LOADER_PATIENT_DIMENSION_INPUT / _OUTPUT
- LOADER_SHRINE_ONTOLOGY_INPUT / _OUTPUT
- LOADER_SENSITIVE_CONCEPTS_FILE
- LOADER_PUBLIC_KEY
- LOADER_ONTOLOGY_ROOT
- LOADER_EMISSION_POLICY      (sensitive_only | all)
- LOADER_ERROR_POLICY         (abort | skip)
- LOADER_DEDUPE_MODIFIER_ROWS (true | false)
- LOG_LEVEL

============================================================
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv

from shrine_ontology.config import (
    EmissionPolicy,
    ErrorPolicy,
    OntologyConfig,
    load_sensitive_paths,
)

from .constants import (
    ADAPTER_MAPPINGS,
    DEFAULT_INPUT_PATHS,
    DEFAULT_ONTOLOGY_ROOT,
    DEFAULT_OUTPUT_PATHS,
    PATIENT_DIMENSION,
    SHRINE_ONTOLOGY,
)
from .exceptions import InvalidConfigError, SourceReadError


logger = logging.getLogger(__name__)

FILE_KEYS = (ADAPTER_MAPPINGS, PATIENT_DIMENSION, SHRINE_ONTOLOGY)
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class LoaderConfig:
    """Configuration for a loader run."""

    input_paths: Dict[str, Path] = field(
        default_factory=lambda: {k: Path(v) for k, v in DEFAULT_INPUT_PATHS.items()}
    )
    """Source file per file key."""

    output_paths: Dict[str, Path] = field(
        default_factory=lambda: {k: Path(v) for k, v in DEFAULT_OUTPUT_PATHS.items()}
    )
    """Destination file per file key."""

    sensitive_concepts_file: Optional[Path] = None
    """YAML file listing sensitive concept paths."""

    public_key: Optional[str] = None
    """Accepted for the patient dimension; never applied."""

    log_level: str = "INFO"

    ontology: OntologyConfig = field(default_factory=OntologyConfig)

    @classmethod
    def from_env(cls, dotenv_path: Optional[Union[str, Path]] = None) -> "LoaderConfig":
        """Load configuration from environment variables (and .env)."""
        load_dotenv(dotenv_path)

        config = cls()
        for key in FILE_KEYS:
            if os.getenv(f"LOADER_{key}_INPUT"):
                config.input_paths[key] = Path(os.getenv(f"LOADER_{key}_INPUT"))
            if os.getenv(f"LOADER_{key}_OUTPUT"):
                config.output_paths[key] = Path(os.getenv(f"LOADER_{key}_OUTPUT"))

        if os.getenv("LOADER_SENSITIVE_CONCEPTS_FILE"):
            config.sensitive_concepts_file = Path(os.getenv("LOADER_SENSITIVE_CONCEPTS_FILE"))

        config.public_key = os.getenv("LOADER_PUBLIC_KEY") or None
        config.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        config.ontology.ontology_root = os.getenv("LOADER_ONTOLOGY_ROOT", DEFAULT_ONTOLOGY_ROOT)
        config.ontology.emission_policy = _parse_enum(
            EmissionPolicy, "LOADER_EMISSION_POLICY", os.getenv("LOADER_EMISSION_POLICY", "sensitive_only")
        )
        config.ontology.error_policy = _parse_enum(
            ErrorPolicy, "LOADER_ERROR_POLICY", os.getenv("LOADER_ERROR_POLICY", "abort")
        )
        config.ontology.dedupe_modifier_rows = (
            os.getenv("LOADER_DEDUPE_MODIFIER_ROWS", "true").lower() == "true"
        )
        return config

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "LoaderConfig":
        """
        Load configuration from a YAML file.

            inputs:
              SHRINE_ONTOLOGY: data/original/shrine.csv
            outputs:
              SHRINE_ONTOLOGY: data/converted/shrine.csv
            sensitive_concepts_file: sensitive.yaml
            public_key: ...
            log_level: INFO
            ontology:
              sensitive_concepts: [...]
              emission_policy: sensitive_only
              error_policy: abort

        Relative paths are resolved against the YAML file.
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise SourceReadError(
                f"Cannot read config file {path.name}",
                file_name=path.name,
                file_path=str(path),
                cause=e,
            ) from e
        except yaml.YAMLError as e:
            raise InvalidConfigError("config", str(path), f"invalid YAML: {e}") from e

        if not isinstance(data, dict):
            raise InvalidConfigError("config", str(path), "top level must be a mapping")

        base = path.parent
        config = cls()
        for section, target in (("inputs", config.input_paths), ("outputs", config.output_paths)):
            for key, value in (data.get(section) or {}).items():
                key = str(key).upper()
                if key not in FILE_KEYS:
                    raise InvalidConfigError(f"{section}.{key}", value, f"unknown file key, expected one of {FILE_KEYS}")
                target[key] = _resolve(base, value)

        if data.get("sensitive_concepts_file"):
            config.sensitive_concepts_file = _resolve(base, data["sensitive_concepts_file"])

        config.public_key = data.get("public_key") or None
        config.log_level = str(data.get("log_level", "INFO")).upper()
        config.ontology = OntologyConfig.from_dict(data.get("ontology") or {})
        return config

    def resolve_sensitive_paths(self) -> None:
        """Merge the sensitive concepts file into the ontology config."""
        if self.sensitive_concepts_file is not None:
            self.ontology.sensitive_paths |= load_sensitive_paths(self.sensitive_concepts_file)

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.log_level not in LOG_LEVELS:
            errors.append(f"log_level must be one of {LOG_LEVELS}")

        for key in FILE_KEYS:
            if key not in self.input_paths:
                errors.append(f"missing input path for {key}")
            if key not in self.output_paths:
                errors.append(f"missing output path for {key}")

        errors.extend(self.ontology.validate())
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inputs": {k: str(v) for k, v in self.input_paths.items()},
            "outputs": {k: str(v) for k, v in self.output_paths.items()},
            "sensitive_concepts_file": str(self.sensitive_concepts_file) if self.sensitive_concepts_file else None,
            "public_key_set": bool(self.public_key),
            "log_level": self.log_level,
            "ontology": self.ontology.to_dict(),
        }


def load_config(path: Optional[Path] = None) -> LoaderConfig:
    """
    Load configuration from file or the environment.

    Args:
        path: Optional path to YAML config file

    Returns:
        LoaderConfig instance with sensitive paths resolved
    """
    if path is not None:
        config = LoaderConfig.from_yaml(path)
    else:
        config = LoaderConfig.from_env()
    config.resolve_sensitive_paths()
    return config


def _resolve(base: Path, value: Any) -> Path:
    candidate = Path(str(value))
    return candidate if candidate.is_absolute() else base / candidate


def _parse_enum(enum_cls, key: str, value: str):
    try:
        return enum_cls(value.lower())
    except ValueError:
        raise InvalidConfigError(key, value, f"expected one of {[e.value for e in enum_cls]}") from None
