"""
Company file parser.

Turns an uploaded Excel workbook or CSV file into an ordered list of
rows keyed by the exact header names found in the file.

Excel: first sheet only, read into memory in one go.
CSV: read in chunks; any malformed chunk fails the whole parse.
"""

from datetime import date, datetime, time
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Any, Iterator, Optional, Union
import structlog

import pandas as pd

from config import settings
from exceptions import CompanyParseError
from models.company import FieldMap

logger = structlog.get_logger(__name__)

FileSource = Union[str, Path, BytesIO, bytes]

EXCEL_EXTENSIONS = (".xlsx", ".xlsm")
CSV_EXTENSIONS = (".csv", ".txt")


class FileFormat(str, Enum):
    """Source formats accepted by the importer."""
    EXCEL = "excel"
    CSV = "csv"


def detect_file_format(
    content_type: Optional[str] = None,
    filename: Optional[str] = None,
) -> FileFormat:
    """
    Pick the parser for an upload.

    A known file extension decides first; browsers often label .csv
    uploads as application/vnd.ms-excel. Without one, spreadsheet MIME
    types ("...excel", "...spreadsheetml...") select EXCEL and everything
    else is read as CSV.
    """
    name = (filename or "").lower()
    if name.endswith(EXCEL_EXTENSIONS):
        return FileFormat.EXCEL
    if name.endswith(CSV_EXTENSIONS):
        return FileFormat.CSV

    mime = (content_type or "").lower()
    if "excel" in mime or "spreadsheet" in mime:
        return FileFormat.EXCEL

    return FileFormat.CSV


def parse_company_file(
    file: FileSource,
    file_format: FileFormat,
    chunk_size: Optional[int] = None,
) -> list[FieldMap]:
    """
    Parse an uploaded company file.

    Args:
        file: File path or file-like object / raw bytes
        file_format: Which parser to use
        chunk_size: CSV rows per chunk (defaults to settings.csv_chunk_size)

    Returns:
        Rows in file order

    Raises:
        CompanyParseError: If the file is malformed
    """
    logger.info(
        "parsing_company_file",
        file_format=file_format.value,
        file_type=type(file).__name__
    )

    if file_format == FileFormat.EXCEL:
        rows = parse_companies_excel(file)
    else:
        # Materialize so a bad row late in the file aborts before any import
        rows = list(parse_companies_csv(file, chunk_size=chunk_size))

    logger.info("company_file_parsed", file_format=file_format.value, row_count=len(rows))
    return rows


def parse_companies_excel(file: FileSource) -> list[FieldMap]:
    """
    Parse the first sheet of a workbook.

    The first row is the header. Fully blank rows are dropped and empty
    cells are left out of the row.

    Raises:
        CompanyParseError: If the workbook cannot be read or has no sheets
    """
    if isinstance(file, bytes):
        file = BytesIO(file)

    try:
        excel = pd.ExcelFile(file, engine="openpyxl")
    except Exception as e:
        logger.error("excel_read_failed", error=str(e))
        raise CompanyParseError(
            message="Failed to read Excel file",
            details={"original_error": str(e)}
        )

    with excel:
        if not excel.sheet_names:
            raise CompanyParseError(message="Excel file has no sheets")

        sheet_name = excel.sheet_names[0]

        try:
            df = excel.parse(sheet_name, header=0)
        except Exception as e:
            logger.error("excel_sheet_read_failed", sheet=sheet_name, error=str(e))
            raise CompanyParseError(
                message=f"Failed to read sheet: {sheet_name}",
                details={"sheet": sheet_name, "original_error": str(e)}
            )

    df = df.dropna(how="all")
    df.columns = [str(col) for col in df.columns]

    rows = [
        {key: _to_scalar(value) for key, value in record.items() if not _is_missing(value)}
        for record in df.to_dict(orient="records")
    ]

    logger.debug(
        "excel_sheet_parsed",
        sheet=sheet_name,
        columns=list(df.columns),
        row_count=len(rows)
    )

    return rows


def parse_companies_csv(
    file: FileSource,
    chunk_size: Optional[int] = None,
    encoding: str = "utf-8-sig",
) -> Iterator[FieldMap]:
    """
    Stream rows from a CSV file.

    The header line defines the keys. All values are kept as strings and
    empty cells become "". Rows are yielded chunk by chunk as the file
    is consumed.

    Raises:
        CompanyParseError: On malformed rows (e.g. unterminated quotes)
                           or undecodable bytes
    """
    if isinstance(file, bytes):
        file = BytesIO(file)

    chunk_size = chunk_size or settings.csv_chunk_size

    try:
        reader = pd.read_csv(
            file,
            dtype=str,
            index_col=False,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding=encoding,
            chunksize=chunk_size,
        )
        with reader:
            for chunk in reader:
                chunk.columns = [str(col) for col in chunk.columns]
                for record in chunk.to_dict(orient="records"):
                    # Short rows are padded with NaN; leave those keys out
                    yield {key: value for key, value in record.items() if not _is_missing(value)}
    except pd.errors.EmptyDataError:
        logger.debug("csv_empty")
        return
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as e:
        logger.error("csv_read_failed", error=str(e), error_type=type(e).__name__)
        raise CompanyParseError(
            message="Failed to read CSV file",
            details={"original_error": str(e)}
        )


def _is_missing(value: Any) -> bool:
    """True for pandas empty cells (NaN / NaT / None)."""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _to_scalar(value: Any) -> Any:
    """Convert date cells to ISO strings; leave other scalars as they are."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value
