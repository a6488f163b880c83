"""
Converters - Delimited File Source and Sink.

============================================================
RESPONSIBILITY
============================================================
Reads and writes the comma-delimited, double-quoted files
exchanged with i2b2 (shrine.csv, patient_dimension.csv).

- One header row
- Every output field quoted, embedded quotes doubled
- Failures surface as SourceReadError / SinkWriteError
  naming the file

============================================================
"""

import csv
import io
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from core.exceptions import SinkWriteError, SourceReadError


logger = logging.getLogger(__name__)


# ============================================================
# LINE FORMAT
# ============================================================

def format_csv_line(fields: Sequence[object]) -> str:
    """Format one fully quoted CSV line, without terminator."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=",", quotechar='"', quoting=csv.QUOTE_ALL, lineterminator="")
    writer.writerow(["" if f is None else str(f) for f in fields])
    return buffer.getvalue()


def parse_csv_line(line: str) -> List[str]:
    """Parse a single CSV line."""
    return next(csv.reader([line], delimiter=",", quotechar='"'))


# ============================================================
# SOURCE
# ============================================================

class TabularSource:
    """A delimited input file with one header row."""

    def __init__(self, path: Union[str, Path], name: Optional[str] = None, encoding: str = "utf-8"):
        self.path = Path(path)
        self.name = name or self.path.name
        self.encoding = encoding

    def read(self) -> Tuple[List[str], List[List[str]]]:
        """
        Read the whole file.

        Returns:
            (header, rows) with the header stripped from rows

        Raises:
            SourceReadError: missing, unreadable, undecodable or
                empty file
        """
        try:
            with open(self.path, "r", encoding=self.encoding, newline="") as f:
                lines = list(csv.reader(f, delimiter=",", quotechar='"'))
        except FileNotFoundError as e:
            raise self._error(f"Input file [{self.name}] not found", e) from e
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise self._error(f"Error reading [{self.name}]", e) from e

        if not lines:
            raise self._error(f"Input file [{self.name}] is empty")

        logger.debug(f"Read {len(lines) - 1} rows from {self.path}")
        return lines[0], lines[1:]

    def _error(self, message: str, cause: Optional[Exception] = None) -> SourceReadError:
        return SourceReadError(message, file_name=self.name, file_path=str(self.path), cause=cause)


class MemorySource:
    """In-memory source with the same interface as TabularSource."""

    def __init__(self, header: Sequence[str], rows: Sequence[Sequence[str]], name: str = "memory"):
        self.name = name
        self._header = list(header)
        self._rows = [list(r) for r in rows]

    def read(self) -> Tuple[List[str], List[List[str]]]:
        return list(self._header), [list(r) for r in self._rows]


# ============================================================
# SINKS
# ============================================================

class TabularSink:
    """
    A delimited output file.

    Use as a context manager; parent directories are created.
    Rows go to a .tmp file next to the destination, which only
    replaces the destination when the block exits cleanly. A
    failed run leaves any previous output untouched.
    """

    def __init__(self, path: Union[str, Path], name: Optional[str] = None, encoding: str = "utf-8"):
        self.path = Path(path)
        self.name = name or self.path.name
        self.encoding = encoding
        self.rows_written = 0
        self._tmp_path = self.path.with_name(self.path.name + ".tmp")
        self._handle = None

    def __enter__(self) -> "TabularSink":
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = open(self._tmp_path, "w", encoding=self.encoding, newline="")
        except OSError as e:
            raise SinkWriteError(
                f"Error creating converted [{self.name}]",
                file_name=self.name,
                file_path=str(self.path),
                cause=e,
            ) from e
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._handle is None:
            return
        self._handle.close()
        self._handle = None

        if exc_type is not None:
            self._tmp_path.unlink(missing_ok=True)
            logger.debug(f"Discarded partial output for {self.path}")
            return

        try:
            os.replace(self._tmp_path, self.path)
        except OSError as e:
            raise SinkWriteError(
                f"Error writing converted [{self.name}]",
                file_name=self.name,
                file_path=str(self.path),
                cause=e,
            ) from e

    def write_header(self, columns: Sequence[str]) -> None:
        self._write(format_csv_line(columns) + "\n")

    def write_line(self, fields: Sequence[object]) -> None:
        self._write(format_csv_line(fields) + "\n")
        self.rows_written += 1

    def _write(self, text: str) -> None:
        if self._handle is None:
            raise SinkWriteError(f"Sink [{self.name}] is not open", file_name=self.name)
        try:
            self._handle.write(text)
        except OSError as e:
            raise SinkWriteError(
                f"Error writing converted [{self.name}]",
                file_name=self.name,
                file_path=str(self.path),
                cause=e,
            ) from e


class MemorySink:
    """List-backed sink for tests and dry runs."""

    def __init__(self, name: str = "memory"):
        self.name = name
        self.header: Optional[List[str]] = None
        self.rows: List[List[str]] = []
        self.lines: List[str] = []

    @property
    def rows_written(self) -> int:
        return len(self.rows)

    def __enter__(self) -> "MemorySink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        pass

    def write_header(self, columns: Sequence[str]) -> None:
        self.header = list(columns)
        self.lines.append(format_csv_line(columns))

    def write_line(self, fields: Sequence[object]) -> None:
        self.rows.append(["" if f is None else str(f) for f in fields])
        self.lines.append(format_csv_line(fields))
