"""
Tests for Core Configuration and Exceptions.
"""

from pathlib import Path

import pytest

from core.exceptions import InvalidConfigError, SourceReadError


LOADER_ENV_VARS = [
    "LOADER_SHRINE_ONTOLOGY_INPUT",
    "LOADER_SHRINE_ONTOLOGY_OUTPUT",
    "LOADER_SENSITIVE_CONCEPTS_FILE",
    "LOADER_PUBLIC_KEY",
    "LOADER_ONTOLOGY_ROOT",
    "LOADER_EMISSION_POLICY",
    "LOADER_ERROR_POLICY",
    "LOADER_DEDUPE_MODIFIER_ROWS",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Environment without loader variables, run from an empty directory."""
    for var in LOADER_ENV_VARS:
        # setenv first so monkeypatch also undoes values loaded from .env
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def sensitive_yaml(tmp_path):
    path = tmp_path / "sensitive.yaml"
    path.write_text(
        "sensitive_concepts:\n"
        "  - '\\SHRINE\\Diagnoses\\'\n"
        "  - '\\Admit Diagnosis\\'\n",
        encoding="utf-8",
    )
    return path


# ============================================================
# SENSITIVE PATH LOADING
# ============================================================

class TestSensitivePaths:
    """Tests for load_sensitive_paths."""

    def test_mapping_form(self, sensitive_yaml):
        """Test the sensitive_concepts key is read."""
        from shrine_ontology.config import load_sensitive_paths

        assert load_sensitive_paths(sensitive_yaml) == {"\\SHRINE\\Diagnoses\\", "\\Admit Diagnosis\\"}

    def test_bare_list_form(self, tmp_path):
        """Test a top-level list is accepted."""
        from shrine_ontology.config import load_sensitive_paths

        path = tmp_path / "list.yaml"
        path.write_text("- '\\A\\'\n- '\\A\\B\\'\n", encoding="utf-8")

        assert load_sensitive_paths(path) == {"\\A\\", "\\A\\B\\"}

    def test_wrong_shape(self, tmp_path):
        """Test non-string entries are rejected."""
        from shrine_ontology.config import load_sensitive_paths

        path = tmp_path / "bad.yaml"
        path.write_text("sensitive_concepts:\n  - 1\n  - 2\n", encoding="utf-8")

        with pytest.raises(InvalidConfigError):
            load_sensitive_paths(path)

    def test_missing_file(self, tmp_path):
        """Test a missing file raises SourceReadError."""
        from shrine_ontology.config import load_sensitive_paths

        with pytest.raises(SourceReadError):
            load_sensitive_paths(tmp_path / "missing.yaml")


# ============================================================
# ONTOLOGY CONFIG
# ============================================================

class TestOntologyConfig:
    """Tests for OntologyConfig."""

    def test_defaults(self):
        """Test default policies."""
        from shrine_ontology.config import EmissionPolicy, ErrorPolicy, OntologyConfig

        config = OntologyConfig()

        assert config.emission_policy == EmissionPolicy.SENSITIVE_ONLY
        assert config.error_policy == ErrorPolicy.ABORT
        assert config.dedupe_modifier_rows is True
        assert config.ontology_root == "SHRINE"
        assert config.validate() == []

    def test_validate_flags_unwrapped_paths(self):
        """Test unwrapped sensitive paths are reported."""
        from shrine_ontology.config import OntologyConfig

        errors = OntologyConfig(sensitive_paths={"SHRINE\\Diagnoses"}).validate()

        assert len(errors) == 1
        assert "must start and end" in errors[0]

    def test_from_dict_rejects_unknown_policy(self):
        """Test an invalid policy value raises InvalidConfigError."""
        from shrine_ontology.config import OntologyConfig

        with pytest.raises(InvalidConfigError):
            OntologyConfig.from_dict({"emission_policy": "everything"})


# ============================================================
# LOADER CONFIG
# ============================================================

class TestLoaderConfig:
    """Tests for LoaderConfig."""

    def test_defaults(self, clean_env):
        """Test default paths mirror data/original -> data/converted."""
        from core.config import LoaderConfig

        config = LoaderConfig.from_env()

        assert config.input_paths["SHRINE_ONTOLOGY"] == Path("data/original/shrine.csv")
        assert config.output_paths["ADAPTER_MAPPINGS"] == Path("data/converted/AdapterMappings.xml")
        assert config.public_key is None
        assert config.validate() == []

    def test_from_env(self, clean_env, sensitive_yaml):
        """Test environment variables override defaults."""
        from core.config import LoaderConfig
        from shrine_ontology.config import EmissionPolicy, ErrorPolicy

        clean_env.setenv("LOADER_SHRINE_ONTOLOGY_INPUT", "/in/shrine.csv")
        clean_env.setenv("LOADER_SENSITIVE_CONCEPTS_FILE", str(sensitive_yaml))
        clean_env.setenv("LOADER_EMISSION_POLICY", "ALL")
        clean_env.setenv("LOADER_ERROR_POLICY", "skip")
        clean_env.setenv("LOADER_DEDUPE_MODIFIER_ROWS", "false")
        clean_env.setenv("LOG_LEVEL", "debug")

        config = LoaderConfig.from_env()
        config.resolve_sensitive_paths()

        assert config.input_paths["SHRINE_ONTOLOGY"] == Path("/in/shrine.csv")
        assert config.ontology.emission_policy == EmissionPolicy.ALL
        assert config.ontology.error_policy == ErrorPolicy.SKIP
        assert config.ontology.dedupe_modifier_rows is False
        assert config.log_level == "DEBUG"
        assert "\\Admit Diagnosis\\" in config.ontology.sensitive_paths

    def test_from_env_bad_policy(self, clean_env):
        """Test an invalid policy in the environment is rejected."""
        from core.config import LoaderConfig

        clean_env.setenv("LOADER_ERROR_POLICY", "retry")

        with pytest.raises(InvalidConfigError):
            LoaderConfig.from_env()

    def test_from_env_reads_dotenv(self, clean_env, tmp_path):
        """Test a .env file is honored."""
        from core.config import LoaderConfig

        dotenv = tmp_path / ".env"
        dotenv.write_text("LOADER_PUBLIC_KEY=abc123\n", encoding="utf-8")

        config = LoaderConfig.from_env(dotenv_path=dotenv)

        assert config.public_key == "abc123"

    def test_from_yaml_resolves_relative_paths(self, tmp_path, sensitive_yaml):
        """Test YAML paths are resolved against the config file."""
        from core.config import load_config
        from shrine_ontology.config import EmissionPolicy

        config_path = tmp_path / "loader.yaml"
        config_path.write_text(
            "inputs:\n"
            "  shrine_ontology: in/shrine.csv\n"
            "outputs:\n"
            "  SHRINE_ONTOLOGY: out/shrine.csv\n"
            "sensitive_concepts_file: sensitive.yaml\n"
            "ontology:\n"
            "  sensitive_concepts:\n"
            "    - '\\Extra\\'\n"
            "  emission_policy: all\n",
            encoding="utf-8",
        )

        config = load_config(config_path)

        assert config.input_paths["SHRINE_ONTOLOGY"] == tmp_path / "in" / "shrine.csv"
        assert config.output_paths["SHRINE_ONTOLOGY"] == tmp_path / "out" / "shrine.csv"
        assert config.ontology.emission_policy == EmissionPolicy.ALL
        assert config.ontology.sensitive_paths == {"\\Extra\\", "\\SHRINE\\Diagnoses\\", "\\Admit Diagnosis\\"}

    def test_from_yaml_unknown_file_key(self, tmp_path):
        """Test unknown file keys are rejected."""
        from core.config import LoaderConfig

        config_path = tmp_path / "loader.yaml"
        config_path.write_text("inputs:\n  OBSERVATION_FACT: x.csv\n", encoding="utf-8")

        with pytest.raises(InvalidConfigError):
            LoaderConfig.from_yaml(config_path)

    def test_validate_log_level(self):
        """Test an unknown log level is reported."""
        from core.config import LoaderConfig

        config = LoaderConfig(log_level="LOUD")

        assert any("log_level" in e for e in config.validate())


# ============================================================
# EXCEPTIONS
# ============================================================

class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_row_errors_are_recoverable(self):
        """Test per-record errors can be skipped, file errors cannot."""
        from core.exceptions import MalformedRowError, SinkWriteError, UnknownNodeKindError

        assert MalformedRowError("bad", line_number=3).is_recoverable
        assert UnknownNodeKindError("x").is_recoverable
        assert not SinkWriteError("disk full", file_name="shrine.csv").is_recoverable

    def test_log_format_includes_context(self):
        """Test the log line names the file and stage."""
        from core.exceptions import PipelineError

        error = PipelineError("Error parsing", stage="parse", file_name="shrine.csv")
        text = error.to_log_format()

        assert text.startswith("[HIGH] PipelineError: Error parsing")
        assert "stage=parse" in text
        assert "file=shrine.csv" in text
