"""Entry point for running one reminder job.

Allows running with: python -m src.reminders
"""

import sys

from src.reminders.cli import main

if __name__ == "__main__":
    sys.exit(main())
