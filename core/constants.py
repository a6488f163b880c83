"""
Core Module - Constants.

============================================================
RESPONSIBILITY
============================================================
Defines all loader-wide constants.

- Column layouts of the converted files
- Path delimiter and ontology markers
- Default input/output locations

============================================================
"""

from typing import Dict, Tuple


# ============================================================
# PATH ENCODING
# ============================================================

PATH_DELIMITER = "\\"

ONTOLOGY_VERSION_MARKER = "ONTOLOGYVERSION"
DEFAULT_ONTOLOGY_ROOT = "SHRINE"
CONVERTED_SUFFIX = "_Converted"

CONCEPT_FACT_COLUMN = "concept_cd"
MODIFIER_FACT_COLUMN = "modifier_cd"


# ============================================================
# SHRINE ONTOLOGY SCHEMA
# ============================================================

SHRINE_ONTOLOGY_COLUMNS: Tuple[str, ...] = (
    # mandatory
    "c_hlevel",
    "c_fullname",
    "c_name",
    "c_synonym_cd",
    "c_visualattributes",
    "c_totalnum",
    "c_basecode",
    "c_metadataxml",
    "c_facttablecolumn",
    "c_tablename",
    "c_columnname",
    "c_columndatatype",
    "c_operator",
    "c_dimcode",
    "c_comment",
    "c_tooltip",
    # admin
    "update_date",
    "download_date",
    "import_date",
    "sourcesystem_cd",
    # mandatory
    "valuetype_cd",
    "m_applied_path",
    "m_exclusion_cd",
)

# Appended to every emitted ontology row.
LINK_COLUMNS: Tuple[str, ...] = ("node_surrogate_id", "child_surrogate_ids")


# ============================================================
# PATIENT DIMENSION SCHEMA
# ============================================================

PATIENT_DIMENSION_KEY = "patient_num"
DUMMY_FLAG_COLUMN = "enc_dummy_flag_cd"
REAL_PATIENT_FLAG = "0"


# ============================================================
# FILES
# ============================================================

ADAPTER_MAPPINGS = "ADAPTER_MAPPINGS"
PATIENT_DIMENSION = "PATIENT_DIMENSION"
SHRINE_ONTOLOGY = "SHRINE_ONTOLOGY"

DEFAULT_INPUT_PATHS: Dict[str, str] = {
    ADAPTER_MAPPINGS: "data/original/AdapterMappings.xml",
    PATIENT_DIMENSION: "data/original/patient_dimension.csv",
    SHRINE_ONTOLOGY: "data/original/shrine.csv",
}

DEFAULT_OUTPUT_PATHS: Dict[str, str] = {
    ADAPTER_MAPPINGS: "data/converted/AdapterMappings.xml",
    PATIENT_DIMENSION: "data/converted/patient_dimension.csv",
    SHRINE_ONTOLOGY: "data/converted/shrine.csv",
}

XML_HEADER = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
