"""
Unit tests for the company file parser.

Excel files are built in memory with pandas; CSV files are raw bytes.
"""

from io import BytesIO
from unittest.mock import patch
import pytest
import pandas as pd

from parsers.company_file_parser import (
    FileFormat,
    detect_file_format,
    parse_company_file,
    parse_companies_excel,
    parse_companies_csv,
)
from exceptions import CompanyParseError


# ===================
# HELPERS
# ===================

def create_excel_file(sheets: dict[str, list[dict]], columns: list[str] = None) -> BytesIO:
    """Helper to create test Excel files in memory (sheet order preserved)."""
    output = BytesIO()

    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            df = pd.DataFrame(rows, columns=columns)
            df.to_excel(writer, sheet_name=sheet_name, index=False)

    output.seek(0)
    return output


# ===================
# FORMAT DETECTION
# ===================

class TestDetectFileFormat:
    """Tests for detect_file_format()"""

    @pytest.mark.parametrize("content_type", [
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ])
    def test_spreadsheet_mime_types_are_excel(self, content_type):
        assert detect_file_format(content_type, "upload.bin") == FileFormat.EXCEL
        assert detect_file_format(content_type, None) == FileFormat.EXCEL

    def test_csv_extension_wins_over_excel_mime(self):
        assert detect_file_format("application/vnd.ms-excel", "companies.csv") == FileFormat.CSV

    def test_excel_extension_wins_over_text_mime(self):
        assert detect_file_format("text/plain", "companies.xlsx") == FileFormat.EXCEL

    def test_csv_mime_type_is_csv(self):
        assert detect_file_format("text/csv", "companies.csv") == FileFormat.CSV

    def test_excel_extension_without_mime(self):
        assert detect_file_format(None, "Companies.XLSX") == FileFormat.EXCEL

    def test_unknown_defaults_to_csv(self):
        assert detect_file_format("application/octet-stream", None) == FileFormat.CSV


# ===================
# EXCEL
# ===================

class TestParseCompaniesExcel:
    """Tests for parse_companies_excel()"""

    def test_rows_keep_order_and_header_names(self):
        excel_file = create_excel_file({
            "Companies": [
                {"name": "Acme", "industry": "Tech", "email": "a@x.com", "Extra Column": "x"},
                {"name": "Beta", "industry": "Retail", "email": "b@x.com", "Extra Column": "y"},
            ]
        })

        rows = parse_companies_excel(excel_file)

        assert [r["email"] for r in rows] == ["a@x.com", "b@x.com"]
        assert list(rows[0].keys()) == ["name", "industry", "email", "Extra Column"]

    def test_only_first_sheet_is_read(self):
        excel_file = create_excel_file({
            "First": [{"email": "first@x.com"}],
            "Second": [{"email": "second@x.com"}],
        })

        rows = parse_companies_excel(excel_file)

        assert rows == [{"email": "first@x.com"}]

    def test_empty_cells_are_left_out(self):
        excel_file = create_excel_file({
            "Companies": [
                {"name": "Acme", "industry": None, "email": "a@x.com"},
            ]
        }, columns=["name", "industry", "email"])

        rows = parse_companies_excel(excel_file)

        assert rows == [{"name": "Acme", "email": "a@x.com"}]

    def test_blank_rows_are_dropped(self):
        excel_file = create_excel_file({
            "Companies": [
                {"name": "Acme", "email": "a@x.com"},
                {"name": None, "email": None},
                {"name": "Beta", "email": "b@x.com"},
            ]
        }, columns=["name", "email"])

        rows = parse_companies_excel(excel_file)

        assert len(rows) == 2

    def test_numeric_cells_stay_numeric(self):
        excel_file = create_excel_file({
            "Companies": [{"email": "a@x.com", "phone": 5550100}]
        })

        rows = parse_companies_excel(excel_file)

        assert rows[0]["phone"] == 5550100

    def test_header_only_sheet_gives_no_rows(self):
        excel_file = create_excel_file({"Companies": []}, columns=["name", "email"])

        assert parse_companies_excel(excel_file) == []

    def test_accepts_raw_bytes(self):
        excel_file = create_excel_file({"Companies": [{"email": "a@x.com"}]})

        rows = parse_companies_excel(excel_file.getvalue())

        assert rows == [{"email": "a@x.com"}]

    def test_workbook_read_from_path_is_closed(self, tmp_path):
        path = tmp_path / "companies.xlsx"
        path.write_bytes(create_excel_file({"Companies": [{"email": "a@x.com"}]}).getvalue())

        with patch.object(pd.ExcelFile, "close", autospec=True) as mock_close:
            rows = parse_companies_excel(str(path))

        assert rows == [{"email": "a@x.com"}]
        mock_close.assert_called_once()

    def test_invalid_file_raises_parse_error(self):
        with pytest.raises(CompanyParseError) as exc_info:
            parse_companies_excel(BytesIO(b"this is not a workbook"))

        assert exc_info.value.code == "COMPANY_PARSE_ERROR"
        assert exc_info.value.status_code == 422


# ===================
# CSV
# ===================

class TestParseCompaniesCsv:
    """Tests for parse_companies_csv()"""

    def test_header_defines_keys(self):
        data = b"name,industry,email\nAcme,Tech,a@x.com\nBeta,,b@x.com\n"

        rows = list(parse_companies_csv(BytesIO(data)))

        assert rows == [
            {"name": "Acme", "industry": "Tech", "email": "a@x.com"},
            {"name": "Beta", "industry": "", "email": "b@x.com"},
        ]

    def test_values_are_strings(self):
        data = b"email,phone\na@x.com,0055501\n"

        rows = list(parse_companies_csv(BytesIO(data)))

        assert rows[0]["phone"] == "0055501"

    def test_exact_header_names_preserved(self):
        data = b"Email,Company Name\na@x.com,Acme\n"

        rows = list(parse_companies_csv(BytesIO(data)))

        assert rows == [{"Email": "a@x.com", "Company Name": "Acme"}]

    def test_utf8_bom_is_stripped_from_header(self):
        data = "\ufeffemail,name\na@x.com,Café\n".encode("utf-8")

        rows = list(parse_companies_csv(BytesIO(data)))

        assert rows == [{"email": "a@x.com", "name": "Café"}]

    def test_rows_stream_across_chunks(self):
        lines = ["email,name"] + [f"c{i}@x.com,C{i}" for i in range(7)]
        data = ("\n".join(lines) + "\n").encode("utf-8")

        rows = list(parse_companies_csv(BytesIO(data), chunk_size=2))

        assert [r["email"] for r in rows] == [f"c{i}@x.com" for i in range(7)]

    def test_empty_file_gives_no_rows(self):
        assert list(parse_companies_csv(BytesIO(b""))) == []

    def test_unterminated_quote_raises_parse_error(self):
        data = b'email,name\na@x.com,Acme\nb@x.com,"Beta\n'

        with pytest.raises(CompanyParseError):
            list(parse_companies_csv(BytesIO(data)))

    def test_trailing_comma_on_data_lines_keeps_columns(self):
        data = b"email,name\na@x.com,Acme,\nb@x.com,Beta,\n"

        rows = list(parse_companies_csv(BytesIO(data)))

        assert rows == [
            {"email": "a@x.com", "name": "Acme"},
            {"email": "b@x.com", "name": "Beta"},
        ]

    def test_row_with_too_many_fields_raises_parse_error(self):
        data = b"email,name\na@x.com,Acme\nb@x.com,Beta,extra,fields\n"

        with pytest.raises(CompanyParseError):
            list(parse_companies_csv(BytesIO(data)))


# ===================
# DISPATCH
# ===================

class TestParseCompanyFile:
    """Tests for parse_company_file()"""

    def test_csv_failure_mid_stream_returns_nothing(self):
        data = b'email,name\na@x.com,Acme\nb@x.com,Beta\nc@x.com,"Gamma\n'

        with pytest.raises(CompanyParseError):
            parse_company_file(BytesIO(data), FileFormat.CSV, chunk_size=1)

    def test_dispatches_to_excel(self):
        excel_file = create_excel_file({"Companies": [{"email": "a@x.com"}]})

        rows = parse_company_file(excel_file, FileFormat.EXCEL)

        assert rows == [{"email": "a@x.com"}]

    def test_dispatches_to_csv(self):
        rows = parse_company_file(b"email\na@x.com\n", FileFormat.CSV)

        assert rows == [{"email": "a@x.com"}]
