"""
Tests for the convert_ontology command line.
"""

import pytest
import yaml

from converters.tabular import format_csv_line, parse_csv_line


@pytest.fixture
def dataset(tmp_path, shrine_header, diagnosis_rows, diagnosis_sensitive_paths):
    """An original/ directory with all three inputs and a loader.yaml."""
    original = tmp_path / "original"
    original.mkdir()

    lines = [format_csv_line(shrine_header)] + [format_csv_line(r) for r in diagnosis_rows]
    (original / "shrine.csv").write_text("\n".join(lines) + "\n", encoding="utf-8")

    (original / "AdapterMappings.xml").write_text(
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        "<AdapterMappings><mappings>"
        "<entry><key>\\\\SHRINE\\SHRINE\\Diagnoses\\</key><value>\\\\i2b2\\i2b2\\Diagnoses\\</value></entry>"
        "<entry><key>\\\\SHRINE\\SHRINE\\Demographics\\</key><value>\\\\i2b2\\i2b2\\Demographics\\</value></entry>"
        "</mappings></AdapterMappings>\n",
        encoding="utf-8",
    )

    (original / "patient_dimension.csv").write_text(
        '"patient_num","sex_cd"\n"1","F"\n',
        encoding="utf-8",
    )

    (tmp_path / "sensitive.yaml").write_text(
        yaml.safe_dump({"sensitive_concepts": sorted(diagnosis_sensitive_paths)}),
        encoding="utf-8",
    )

    config = {
        "inputs": {
            "SHRINE_ONTOLOGY": "original/shrine.csv",
            "ADAPTER_MAPPINGS": "original/AdapterMappings.xml",
            "PATIENT_DIMENSION": "original/patient_dimension.csv",
        },
        "outputs": {
            "SHRINE_ONTOLOGY": "converted/shrine.csv",
            "ADAPTER_MAPPINGS": "converted/AdapterMappings.xml",
            "PATIENT_DIMENSION": "converted/patient_dimension.csv",
        },
        "sensitive_concepts_file": "sensitive.yaml",
        "log_level": "DEBUG",
    }
    config_path = tmp_path / "loader.yaml"
    config_path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return config_path


def _read_rows(path):
    return [parse_csv_line(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestConvertOntologyCli:
    """Tests for main()."""

    def test_full_run(self, dataset):
        """Test all three files are converted."""
        from scripts.convert_ontology import main

        assert main(["--config", str(dataset)]) == 0

        converted = dataset.parent / "converted"
        rows = _read_rows(converted / "shrine.csv")
        assert rows[0][-2:] == ["node_surrogate_id", "child_surrogate_ids"]
        assert len(rows) == 9
        assert rows[1][1] == "\\SHRINE\\Diagnoses\\"
        assert rows[1][-2:] == ["0", "1,2,3"]
        assert rows[5][-2:] == ["0", "1"]

        mappings = (converted / "AdapterMappings.xml").read_text(encoding="utf-8")
        assert "Diagnoses" not in mappings
        assert "Demographics" in mappings

        patients = _read_rows(converted / "patient_dimension.csv")
        assert patients == [["patient_num", "sex_cd", "enc_dummy_flag_cd"], ["1", "F", "0"]]

    def test_only_ontology_with_public_rows(self, dataset):
        """Test --only and --emit-public."""
        from scripts.convert_ontology import main

        assert main(["--config", str(dataset), "--only", "ontology", "--emit-public"]) == 0

        converted = dataset.parent / "converted"
        rows = _read_rows(converted / "shrine.csv")
        paths = [r[1] for r in rows[1:]]
        assert len(rows) == 13
        assert "\\SHRINE\\ONTOLOGYVERSION\\SHRINE_Version_1.0_Converted\\" in paths
        assert not (converted / "AdapterMappings.xml").exists()

    def test_missing_input_fails(self, dataset):
        """Test a missing source exits with 1."""
        from scripts.convert_ontology import main

        (dataset.parent / "original" / "patient_dimension.csv").unlink()

        assert main(["--config", str(dataset), "--only", "patient-dimension"]) == 1

    def test_bad_row_aborts_unless_skipped(self, dataset):
        """Test a malformed sensitive row aborts by default and is skipped on request."""
        from scripts.convert_ontology import main

        shrine = dataset.parent / "original" / "shrine.csv"
        bad = ["1", "\\SHRINE\\Diagnoses\\"] + [""] * 21
        with open(shrine, "a", encoding="utf-8") as f:
            f.write(format_csv_line(bad) + "\n")

        assert main(["--config", str(dataset), "--only", "ontology"]) == 1
        assert main(["--config", str(dataset), "--only", "ontology", "--skip-bad-rows"]) == 0

    def test_aborted_run_keeps_previous_output(self, dataset):
        """Test a bad-row abort leaves an earlier converted file intact."""
        from scripts.convert_ontology import main

        converted = dataset.parent / "converted" / "shrine.csv"
        converted.parent.mkdir()
        converted.write_text("PREVIOUS GOOD OUTPUT\n", encoding="utf-8")

        shrine = dataset.parent / "original" / "shrine.csv"
        bad = ["x", "\\SHRINE\\Diagnoses\\"] + [""] * 21
        with open(shrine, "a", encoding="utf-8") as f:
            f.write(format_csv_line(bad) + "\n")

        assert main(["--config", str(dataset), "--only", "ontology"]) == 1
        assert converted.read_text(encoding="utf-8") == "PREVIOUS GOOD OUTPUT\n"
        assert sorted(p.name for p in converted.parent.iterdir()) == ["shrine.csv"]

    def test_invalid_config_fails(self, tmp_path):
        """Test an unreadable config exits with 1."""
        from scripts.convert_ontology import main

        assert main(["--config", str(tmp_path / "missing.yaml")]) == 1

    def test_unknown_target_is_usage_error(self, dataset):
        """Test argparse rejects an unknown --only value."""
        from scripts.convert_ontology import main

        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(dataset), "--only", "observations"])

        assert exc_info.value.code == 2
