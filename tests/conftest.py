import sys

from src.schoolerp.logging import setup_logging

# Keep structlog output off stdout so CLI tests can parse what they print.
setup_logging(log_level="CRITICAL", stream=sys.stderr)
