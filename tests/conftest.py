"""
Shared fixtures for the loader test suites.
"""

from typing import Callable, List

import pytest

from core.constants import SHRINE_ONTOLOGY_COLUMNS


def build_row(
    path: str,
    fact_table_column: str = "concept_cd",
    hlevel: str = "1",
    name: str = "",
    visual_attributes: str = "FA",
    total_num: str = "",
) -> List[str]:
    """A shrine.csv row with the display columns derived from the path."""
    fields = [""] * len(SHRINE_ONTOLOGY_COLUMNS)
    fields[0] = hlevel
    fields[1] = path
    fields[2] = name or path
    fields[4] = visual_attributes
    fields[5] = total_num
    fields[8] = fact_table_column
    fields[9] = "concept_dimension"
    fields[10] = "concept_path"
    fields[11] = "T"
    fields[12] = "LIKE"
    fields[13] = path
    fields[15] = path
    return fields


@pytest.fixture
def make_row() -> Callable[..., List[str]]:
    """Factory for shrine.csv rows."""
    return build_row


@pytest.fixture
def shrine_header() -> List[str]:
    return list(SHRINE_ONTOLOGY_COLUMNS)


@pytest.fixture
def diagnosis_sensitive_paths():
    """Sensitive concepts and modifiers from a diagnosis subtree."""
    return {
        "\\SHRINE\\Diagnoses\\",
        "\\SHRINE\\Diagnoses\\Neoplasms (140-239.99)\\",
        "\\SHRINE\\Diagnoses\\Neoplasms (140-239.99)\\Benign neoplasms (210-229.99)\\",
        "\\SHRINE\\Diagnoses\\Neoplasms (140-239.99)\\Benign neoplasms (210-229.99)\\Benign neoplasm of bone (213)\\",
        "\\Admit Diagnosis\\",
        "\\Admit Diagnosis\\Leg\\",
        "\\Principal Diagnosis\\",
    }


@pytest.fixture
def diagnosis_rows(make_row):
    """A small shrine ontology with public, concept and modifier rows."""
    return [
        make_row("\\SHRINE\\", hlevel="0", visual_attributes="CA"),
        make_row("\\SHRINE\\ONTOLOGYVERSION\\", hlevel="1", visual_attributes="CA"),
        make_row("\\SHRINE\\ONTOLOGYVERSION\\SHRINE_Version_1.0\\", hlevel="2", visual_attributes="LA"),
        make_row("\\SHRINE\\Diagnoses\\", hlevel="1"),
        make_row("\\SHRINE\\Diagnoses\\Neoplasms (140-239.99)\\", hlevel="2"),
        make_row("\\SHRINE\\Diagnoses\\Neoplasms (140-239.99)\\Benign neoplasms (210-229.99)\\", hlevel="3"),
        make_row(
            "\\SHRINE\\Diagnoses\\Neoplasms (140-239.99)\\Benign neoplasms (210-229.99)\\Benign neoplasm of bone (213)\\",
            hlevel="4",
            visual_attributes="LA",
        ),
        make_row("\\SHRINE\\Demographics\\", hlevel="1"),
        make_row("\\Admit Diagnosis\\", fact_table_column="modifier_cd", visual_attributes="DA"),
        make_row("\\Admit Diagnosis\\", fact_table_column="MODIFIER_CD", visual_attributes="DA"),
        make_row("\\Admit Diagnosis\\Leg\\", fact_table_column="modifier_cd", hlevel="2", visual_attributes="RA"),
        make_row("\\Principal Diagnosis\\", fact_table_column="modifier_cd", visual_attributes="DA"),
    ]
