"""
Run one scrape from a JSON config file.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from pathlib import Path

from data_collection.scraping import ScrapingService, create_template


def main() -> int:
    parser = argparse.ArgumentParser(description="Scrape a URL with declarative selectors.")
    parser.add_argument("--config", default=None, help="Path to a JSON ScrapingConfig.")
    parser.add_argument("--url", default=None, help="Target URL; overrides the config file.")
    parser.add_argument(
        "--template",
        choices=["table", "list", "article"],
        default=None,
        help="Start from a built-in selector template.",
    )
    parser.add_argument("--test", action="store_true", help="Only probe the URL and suggest an engine.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    service = ScrapingService()

    config: dict = create_template(args.template) if args.template else {}
    if args.config:
        config.update(json.loads(Path(args.config).read_text(encoding="utf-8")))
    if args.url:
        config["url"] = args.url

    if args.test:
        probe = service.test_url(str(config.get("url", "")))
        print(json.dumps(dataclasses.asdict(probe), indent=2))
        return 0 if probe.success else 1

    result = service.scrape(config)
    print(json.dumps(dataclasses.asdict(result), indent=2, default=str, ensure_ascii=False))
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
