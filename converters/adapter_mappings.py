"""
Converters - AdapterMappings.xml.

============================================================
RESPONSIBILITY
============================================================
AdapterMappings.xml maps shrine concept keys to local i2b2
concept paths. Entries whose key belongs to a sensitive
concept are removed from the published copy.

    <AdapterMappings>
        <mappings>
            <entry>
                <key>\\\\SHRINE\\SHRINE\\Diagnoses\\...\\</key>
                <value>\\\\i2b2\\i2b2\\Diagnoses\\...\\</value>
            </entry>
        </mappings>
    </AdapterMappings>

A key starts with \\\\<table>; the concept path is what
follows the table segment. Matching is exact, like the
ontology classifier.

============================================================
"""

import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import AbstractSet, Union

from core.constants import PATH_DELIMITER, XML_HEADER
from core.exceptions import SinkWriteError, SourceReadError


logger = logging.getLogger(__name__)


def mapping_concept_path(key: str) -> str:
    r"""
    Strip the leading \\ and the table segment from a mapping key.

    \\SHRINE\SHRINE\Diagnoses\ -> \SHRINE\Diagnoses\
    """
    remainder = key[2:]
    parts = remainder.split(PATH_DELIMITER, 1)
    if len(parts) < 2:
        return PATH_DELIMITER
    return PATH_DELIMITER + parts[1]


def parse_adapter_mappings(path: Union[str, Path]) -> ET.ElementTree:
    """Read AdapterMappings.xml."""
    path = Path(path)
    try:
        return ET.parse(path)
    except FileNotFoundError as e:
        raise SourceReadError(
            "Error opening [AdapterMappings].xml",
            file_name=path.name,
            file_path=str(path),
            cause=e,
        ) from e
    except (OSError, ET.ParseError) as e:
        raise SourceReadError(
            "Error unmarshaling [AdapterMappings].xml",
            file_name=path.name,
            file_path=str(path),
            cause=e,
        ) from e


def filter_sensitive_entries(tree: ET.ElementTree, sensitive_paths: AbstractSet[str]) -> int:
    """
    Remove the <entry> elements that belong to sensitive concepts.

    Returns:
        Number of entries deleted
    """
    deleted = 0
    for parent in list(tree.getroot().iter()):
        for entry in list(parent.findall("entry")):
            key = (entry.findtext("key") or "").strip()
            if mapping_concept_path(key) in sensitive_paths:
                parent.remove(entry)
                deleted += 1
    return deleted


def write_adapter_mappings(tree: ET.ElementTree, path: Union[str, Path]) -> None:
    """
    Write with the standalone XML header and tab indentation.

    The document goes to a .tmp file first and replaces the
    destination only once fully written.
    """
    path = Path(path)
    tmp = path.with_name(path.name + ".tmp")
    ET.indent(tree, space="\t")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(XML_HEADER)
            f.write(ET.tostring(tree.getroot(), encoding="unicode"))
            f.write("\n")
        os.replace(tmp, path)
    except OSError as e:
        if tmp.exists():
            tmp.unlink()
        raise SinkWriteError(
            "Error writing converted [AdapterMappings].xml",
            file_name=path.name,
            file_path=str(path),
            cause=e,
        ) from e


def convert_adapter_mappings(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    sensitive_paths: AbstractSet[str],
) -> int:
    """
    Filter sensitive entries out of AdapterMappings.xml.

    Returns:
        Number of entries deleted
    """
    tree = parse_adapter_mappings(input_path)
    deleted = filter_sensitive_entries(tree, sensitive_paths)
    logger.info(f"{deleted} adapter mapping entries deleted")
    write_adapter_mappings(tree, output_path)
    return deleted
