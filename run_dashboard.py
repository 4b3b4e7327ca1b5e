#!/usr/bin/env python3
"""Direct launcher for the Facility Budget dashboard.

Runs Streamlit on ``facility_budget/dashboard.py`` from the project root so
that the package imports resolve.
"""

import os
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.resolve()
dashboard_path = project_root / "facility_budget" / "dashboard.py"

if __name__ == "__main__":
    os.chdir(project_root)
    sys.exit(subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        str(dashboard_path),
    ]).returncode)
