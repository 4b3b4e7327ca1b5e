#!/usr/bin/env python3
"""Export every stored financial report in the flat (normalized) form."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from facility_budget.config import configure_logging
from facility_budget.normalization import items_dataframe, normalize_report
from facility_budget.report_storage import ReportStorage


def main(output_dir: Path, fmt: str = 'json', reports_dir: Path | None = None) -> int:
    storage = ReportStorage(reports_dir)
    reports = storage.load_all()
    if not reports:
        print(f"No reports found in {storage.reports_dir}")
        return 1

    output_dir.mkdir(parents=True, exist_ok=True)
    for name, (metadata, forest) in reports.items():
        report = normalize_report(forest, metadata)
        if fmt == 'csv':
            target = output_dir / f"{name}.csv"
            items_dataframe(report).to_csv(target, index=False)
        else:
            target = output_dir / f"{name}.json"
            with target.open('w', encoding='utf-8') as handle:
                json.dump(report, handle, indent=2)
        print(f"  - {name} -> {target}")

    print(f"Exported {len(reports)} report(s).")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Export stored financial reports.')
    parser.add_argument('--output', type=Path, default=PROJECT_ROOT / 'data' / 'exports', help='Destination directory')
    parser.add_argument('--format', choices=['json', 'csv'], default='json', help='Export format')
    parser.add_argument('--reports-dir', type=Path, default=None, help='Override the reports directory')
    args = parser.parse_args()
    configure_logging()
    raise SystemExit(main(args.output, args.format, args.reports_dir))
