"""
Import companies from a local Excel or CSV file.

Usage:
    python scripts/import_companies.py data/companies.xlsx --mode create_new
    python scripts/import_companies.py data/companies.csv --mode update_overwrite
"""

import argparse
import os
import sys

# Allow imports from the project root when running as a script
_root_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..")
sys.path.insert(0, _root_dir)

from dotenv import load_dotenv
load_dotenv(os.path.join(_root_dir, ".env"))

from models.company import ImportMode
from parsers.company_file_parser import FileFormat, detect_file_format
from services.company_import_service import get_company_import_service
from exceptions import AppError


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import companies from an Excel or CSV file")
    parser.add_argument("path", help="Path to the .xlsx or .csv file")
    parser.add_argument(
        "--mode",
        required=True,
        choices=ImportMode.values(),
        help="Merge policy for existing companies"
    )
    parser.add_argument(
        "--format",
        choices=[f.value for f in FileFormat],
        default=None,
        help="Force the file format (default: from the file extension)"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    if not os.path.isfile(args.path):
        print(f"[ERROR] File not found: {args.path}")
        return 1

    file_format = FileFormat(args.format) if args.format else detect_file_format(filename=args.path)

    print(f"Importing {args.path} ({file_format.value}) with mode {args.mode}")

    try:
        summary = get_company_import_service().import_file(args.path, args.mode, file_format)
    except AppError as e:
        print(f"[ERROR] {e.code}: {e.message}")
        return 1

    print(f"[OK] inserted={summary.inserted} updated={summary.updated} skipped={summary.skipped}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
