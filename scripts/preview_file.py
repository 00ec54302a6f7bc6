"""
Preview an upload file from CLI and optionally classify it.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from pathlib import Path

from data_collection.classification import ClassificationService
from data_collection.parsing import FileParserService


def main() -> int:
    parser = argparse.ArgumentParser(description="Preview a CSV, Excel or JSON file.")
    parser.add_argument("path", help="File to preview.")
    parser.add_argument("--rows", type=int, default=20, help="Number of preview rows.")
    parser.add_argument("--delimiter", default=",", help="Default CSV delimiter.")
    parser.add_argument("--sheet", default=None, help="Excel sheet name.")
    parser.add_argument("--skip-rows", type=int, default=0, help="Leading rows to skip.")
    parser.add_argument("--no-header", action="store_true", help="First row holds data, not headers.")
    parser.add_argument("--classify", action="store_true", help="Also classify the previewed columns.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    path = Path(args.path)
    result = FileParserService().preview(
        path.read_bytes(),
        path.name,
        {
            "delimiter": args.delimiter,
            "sheet_name": args.sheet,
            "skip_rows": args.skip_rows,
            "has_header": not args.no_header,
        },
        preview_rows=args.rows,
    )

    payload = dataclasses.asdict(result)
    if args.classify and result.success:
        classification = ClassificationService().classify(result.columns, result.preview)
        payload["classification"] = dataclasses.asdict(classification)

    print(json.dumps(payload, indent=2, default=str, ensure_ascii=False))
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
