"""School ERP timetable client - command-line entry point.

Run with: python scripts/timetable.py classes
Edit:     python scripts/timetable.py edit --class <id> --day Monday --period 3 --subject <id> --teacher <id>
Grid:     python scripts/timetable.py class-grid --class <id>
JSON:     python scripts/timetable.py --json teacher-grid --teacher <id>

Configuration comes from environment variables / .env (ERP_API_URL,
ERP_EMAIL, ERP_PASSWORD, ERP_TOKEN, STATE_DIR, LOG_LEVEL, LOG_JSON).

Exit codes:
  0 = success
  1 = error (message on stderr)
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.schoolerp.cli import main  # noqa: E402

if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
