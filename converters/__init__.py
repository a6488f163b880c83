"""
Converters Package.

File-level conversions around the shrine ontology core.

Modules:
- tabular: Delimited file source and sink
- adapter_mappings: AdapterMappings.xml sensitive-entry filter
- patient_dimension: patient_dimension.csv passthrough
"""

from .tabular import MemorySink, MemorySource, TabularSink, TabularSource, format_csv_line
from .adapter_mappings import convert_adapter_mappings, filter_sensitive_entries
from .patient_dimension import convert_patient_dimension

__all__ = [
    "MemorySink",
    "MemorySource",
    "TabularSink",
    "TabularSource",
    "format_csv_line",
    "convert_adapter_mappings",
    "filter_sensitive_entries",
    "convert_patient_dimension",
]
