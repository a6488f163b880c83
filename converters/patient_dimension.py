"""
Converters - patient_dimension.csv.

============================================================
RESPONSIBILITY
============================================================
Copies patient_dimension.csv field by field and appends the
enc_dummy_flag_cd column, which marks each patient as real
(as opposed to a dummy added for obfuscation).

Source columns (in order):
    patient_num,
    vital_status_cd, birth_date, death_date,
    sex_cd, age_in_years_num, language_cd, race_cd,
    marital_status_cd, religion_cd, zip_cd, statecityzip_path,
    income_cd, patient_blob,
    update_date, download_date, import_date, sourcesystem_cd,
    upload_id

A public key may be supplied but no field is encrypted.

============================================================
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from core.constants import DUMMY_FLAG_COLUMN, PATIENT_DIMENSION_KEY, REAL_PATIENT_FLAG
from core.exceptions import MalformedRowError


logger = logging.getLogger(__name__)


@dataclass
class PatientDimensionRecord:
    """One patient row keyed by patient_num."""
    patient_num: str
    fields: List[str]
    dummy_flag: str = REAL_PATIENT_FLAG

    def to_fields(self) -> List[str]:
        return list(self.fields) + [self.dummy_flag]


@dataclass
class PatientDimensionTable:
    """Parsed patient_dimension.csv."""
    header: List[str]
    records: Dict[str, PatientDimensionRecord] = field(default_factory=dict)

    @property
    def output_header(self) -> List[str]:
        return list(self.header) + [DUMMY_FLAG_COLUMN]


def parse_patient_dimension(
    source,
    public_key: Optional[str] = None,
) -> PatientDimensionTable:
    """
    Read patient_dimension.csv rows.

    Raises:
        SourceReadError: file missing or unreadable
        MalformedRowError: row width differs from the header
    """
    if public_key:
        logger.debug("Public key supplied; patient fields are copied unencrypted")

    header, rows = source.read()
    table = PatientDimensionTable(header=list(header))
    key_index = _key_index(header)

    for offset, row in enumerate(rows):
        line_number = offset + 2
        if len(row) != len(header):
            raise MalformedRowError(
                f"Expected {len(header)} columns, got {len(row)}",
                field="columns",
                actual=len(row),
                line_number=line_number,
            )
        patient_num = row[key_index]
        if patient_num in table.records:
            logger.warning(f"Duplicate patient_num {patient_num} (line {line_number}), keeping last row")
        table.records[patient_num] = PatientDimensionRecord(patient_num=patient_num, fields=list(row))

    logger.info(f"Parsed {len(table.records)} patients from [{source.name}]")
    return table


def write_patient_dimension(table: PatientDimensionTable, sink) -> int:
    """Write header and records; returns rows written."""
    sink.write_header(table.output_header)
    for record in table.records.values():
        sink.write_line(record.to_fields())
    return len(table.records)


def convert_patient_dimension(source, sink, public_key: Optional[str] = None) -> int:
    """
    Convert patient_dimension.csv.

    Args:
        source: TabularSource or MemorySource
        sink: Open TabularSink or MemorySink

    Returns:
        Number of patient rows written
    """
    table = parse_patient_dimension(source, public_key=public_key)
    written = write_patient_dimension(table, sink)
    logger.info(f"Wrote {written} patients to converted [{getattr(sink, 'name', 'sink')}]")
    return written


def _key_index(header: Sequence[str]) -> int:
    try:
        return list(header).index(PATIENT_DIMENSION_KEY)
    except ValueError:
        return 0


__all__ = [
    "PatientDimensionRecord",
    "PatientDimensionTable",
    "parse_patient_dimension",
    "write_patient_dimension",
    "convert_patient_dimension",
]
