"""Financial report storage and file I/O operations.

Each report (facility + project + reporting period) is stored as one JSON
file.  Only the row values travel to disk as-is; every load re-runs the totals
engine so stored derived fields are never trusted.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .budget_tree import BudgetRow, forest_from_records, forest_to_records
from .config import REPORTS_DIR, ensure_data_directories
from .formatting import safe_filename
from .totals import compute_totals

logger = logging.getLogger(__name__)

STORAGE_VERSION = 1
REQUIRED_METADATA = ("facility", "project", "reportingPeriod")


def report_key(facility: str, project: str, period: str) -> str:
    return safe_filename(facility, project, period)


class ReportStorage:
    """Handles financial report file storage operations."""

    def __init__(self, reports_dir: Optional[Path] = None):
        """Initialize report storage.

        Args:
            reports_dir: Optional custom directory for report files.
                        Defaults to REPORTS_DIR from config.
        """
        if reports_dir is None:
            ensure_data_directories()
        self.reports_dir = Path(reports_dir or REPORTS_DIR)
        self.reports_dir.mkdir(parents=True, exist_ok=True)

    def get_path(self, facility: str, project: str, period: str) -> Path:
        return self.reports_dir / f"{report_key(facility, project, period)}.json"

    def save(self, metadata: Mapping[str, Any], forest: Sequence[BudgetRow]) -> Path:
        """Save a report to disk.

        Args:
            metadata: Report header; must include ``facility``, ``project``
                and ``reportingPeriod``
            forest: Report rows (recomputed before writing)

        Returns:
            Path of the written file

        Raises:
            ValueError: If a required metadata field is empty
            OSError: If the file cannot be written
        """
        missing = [key for key in REQUIRED_METADATA if not str(metadata.get(key) or "").strip()]
        if missing:
            raise ValueError(f"Report metadata is missing: {', '.join(missing)}")

        payload = {
            'metadata': dict(metadata),
            'tableData': forest_to_records(compute_totals(forest)),
            'saved_at': datetime.now(timezone.utc).isoformat(),
            'version': STORAGE_VERSION,
        }

        target = self.get_path(metadata['facility'], metadata['project'], metadata['reportingPeriod'])
        try:
            with target.open('w', encoding='utf-8') as handle:
                json.dump(payload, handle, indent=2, sort_keys=True)
        except OSError as e:
            raise OSError(f"Failed to save report to {target}: {e}") from e

        logger.info("Saved report %s", target.name)
        return target

    def _read(self, path: Path) -> Tuple[Dict[str, Any], List[BudgetRow]]:
        with path.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            raise ValueError(f"Report file {path} does not contain an object")
        metadata = data.get('metadata') or {}
        records = data.get('tableData') or []
        return dict(metadata), compute_totals(forest_from_records(records))

    def load(self, facility: str, project: str, period: str) -> Tuple[Dict[str, Any], List[BudgetRow]]:
        """Load a report and recompute its derived values.

        Raises:
            FileNotFoundError: If no report is stored for the key
        """
        target = self.get_path(facility, project, period)
        if not target.exists():
            raise FileNotFoundError(f"No report stored at {target}")
        return self._read(target)

    def load_all(self) -> Dict[str, Tuple[Dict[str, Any], List[BudgetRow]]]:
        """Load all saved reports keyed by file stem.

        Note:
            Reports with invalid data are skipped with a warning.
        """
        reports: Dict[str, Tuple[Dict[str, Any], List[BudgetRow]]] = {}
        for report_file in sorted(self.reports_dir.glob('*.json')):
            try:
                reports[report_file.stem] = self._read(report_file)
            except (json.JSONDecodeError, OSError, ValueError, KeyError, TypeError) as e:
                logger.warning("Could not load report '%s': %s", report_file.stem, e)
                continue
        return reports

    def delete(self, facility: str, project: str, period: str) -> None:
        """Delete a report file; missing files are ignored.

        Raises:
            OSError: If the file exists but cannot be deleted
        """
        target = self.get_path(facility, project, period)
        if not target.exists():
            return

        try:
            target.unlink()
        except OSError as e:
            raise OSError(f"Failed to delete report file {target}: {e}") from e
        logger.info("Deleted report %s", target.name)
