"""
Upload file parsers.
"""

from parsers.company_file_parser import (
    FileFormat,
    detect_file_format,
    parse_company_file,
    parse_companies_excel,
    parse_companies_csv,
)

__all__ = [
    "FileFormat",
    "detect_file_format",
    "parse_company_file",
    "parse_companies_excel",
    "parse_companies_csv",
]
