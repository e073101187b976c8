"""Feedback file parsers.

Turns uploaded or on-disk files (plain text, CSV, Excel, Word) into a list
of feedback lines ready to be classified. Every parser can read either a
filesystem path or an in-memory binary stream, so the same code serves the
CLI and the Streamlit upload widget.
"""

from __future__ import annotations

import csv
import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)

#: Lines this short or shorter are discarded on import.
MIN_LINE_LENGTH = 5


@dataclass
class ParsedFeedback:
    """Structured output from parsing a feedback file."""

    filename: str
    text: str
    metadata: dict = field(default_factory=dict)

    @property
    def lines(self) -> list[str]:
        """Non-trivial lines of the extracted text, stripped."""
        return extract_feedback_lines(self.text)


def extract_feedback_lines(text: str) -> list[str]:
    """Split text on newlines and keep lines longer than five characters."""
    return [
        line.strip()
        for line in text.splitlines()
        if len(line.strip()) > MIN_LINE_LENGTH
    ]


def _decode(data: bytes) -> str:
    """Decode uploaded text, dropping a UTF-8 byte-order mark if present."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


class FeedbackParser(ABC):
    """Base class for feedback parsers.

    Subclasses implement :meth:`parse_stream`; :meth:`parse` opens a path
    and delegates to it.
    """

    format_name: str = ""
    supported_extensions: tuple[str, ...] = ()

    def can_handle(self, filename: str | Path) -> bool:
        return Path(filename).suffix.lower() in self.supported_extensions

    def parse(self, path: str | Path) -> ParsedFeedback:
        """Parse a file on disk.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        with open(path, "rb") as stream:
            return self.parse_stream(stream, path.name)

    @abstractmethod
    def parse_stream(self, stream: BinaryIO, filename: str) -> ParsedFeedback:
        """Parse an open binary stream."""
        ...

    def _result(self, filename: str, text: str, **metadata) -> ParsedFeedback:
        return ParsedFeedback(
            filename=filename,
            text=text,
            metadata={"format": self.format_name, **metadata},
        )


class TextParser(FeedbackParser):
    """Plain text, one feedback entry per line. Also the fallback parser."""

    format_name = "text"
    supported_extensions = (".txt", ".text", ".md")

    def parse_stream(self, stream: BinaryIO, filename: str) -> ParsedFeedback:
        return self._result(filename, _decode(stream.read()))


class CSVParser(FeedbackParser):
    """CSV files. Every non-empty cell becomes its own line."""

    format_name = "csv"
    supported_extensions = (".csv",)

    def parse_stream(self, stream: BinaryIO, filename: str) -> ParsedFeedback:
        content = _decode(stream.read())
        rows = list(csv.reader(io.StringIO(content)))
        cells = [cell.strip() for row in rows for cell in row if cell.strip()]
        return self._result(filename, "\n".join(cells), row_count=len(rows))


class SpreadsheetParser(FeedbackParser):
    """Excel workbooks via openpyxl. Reads every non-empty cell of the first sheet."""

    format_name = "xlsx"
    supported_extensions = (".xlsx", ".xlsm")

    def parse_stream(self, stream: BinaryIO, filename: str) -> ParsedFeedback:
        try:
            from openpyxl import load_workbook
        except ImportError as exc:
            raise ImportError(
                "openpyxl is required for Excel import. Install it with: pip install openpyxl"
            ) from exc

        workbook = load_workbook(io.BytesIO(stream.read()), read_only=True, data_only=True)
        try:
            sheet = workbook.worksheets[0]
            cells = [
                str(value).strip()
                for row in sheet.iter_rows(values_only=True)
                for value in row
                if value is not None and str(value).strip()
            ]
            sheet_name = sheet.title
        finally:
            workbook.close()

        return self._result(filename, "\n".join(cells), sheet=sheet_name)


class LegacySpreadsheetParser(FeedbackParser):
    """Excel 97-2003 ``.xls`` workbooks via xlrd. Same cell rules as ``.xlsx``."""

    format_name = "xls"
    supported_extensions = (".xls",)

    def parse_stream(self, stream: BinaryIO, filename: str) -> ParsedFeedback:
        try:
            import xlrd
        except ImportError as exc:
            raise ImportError(
                "xlrd is required for .xls import. Install it with: pip install xlrd"
            ) from exc

        try:
            book = xlrd.open_workbook(file_contents=stream.read(), logfile=io.StringIO())
        except Exception as exc:
            raise ValueError(f"{filename} is not a readable Excel 97-2003 workbook: {exc}") from exc

        sheet = book.sheet_by_index(0)
        cells = [
            str(value).strip()
            for row in range(sheet.nrows)
            for value in sheet.row_values(row)
            if value not in (None, "") and str(value).strip()
        ]
        return self._result(filename, "\n".join(cells), sheet=sheet.name)


class DOCXParser(FeedbackParser):
    """Word documents via python-docx: paragraphs, then table cells."""

    format_name = "docx"
    supported_extensions = (".docx",)

    def parse_stream(self, stream: BinaryIO, filename: str) -> ParsedFeedback:
        try:
            from docx import Document
        except ImportError as exc:
            raise ImportError(
                "python-docx is required for Word import. Install it with: pip install python-docx"
            ) from exc

        doc = Document(io.BytesIO(stream.read()))
        parts = [p.text for p in doc.paragraphs if p.text.strip()]
        for table in doc.tables:
            for row in table.rows:
                parts.extend(cell.text for cell in row.cells if cell.text.strip())

        return self._result(filename, "\n".join(parts), paragraph_count=len(doc.paragraphs))


def get_parser(filename: str | Path) -> FeedbackParser:
    """Pick a parser by file extension, falling back to plain text."""
    parsers = (
        CSVParser(),
        SpreadsheetParser(),
        LegacySpreadsheetParser(),
        DOCXParser(),
        TextParser(),
    )
    for parser in parsers:
        if parser.can_handle(filename):
            return parser
    logger.info("No dedicated parser for %s, reading as plain text", filename)
    return TextParser()


def parse_feedback_file(path: str | Path) -> ParsedFeedback:
    """Parse a feedback file from disk using the matching parser."""
    return get_parser(path).parse(path)
