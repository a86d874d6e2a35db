#!/usr/bin/env python
"""Management entry point for the vinyl back-office."""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Settings read PRICING_*, VIES_* and DATABASE_* from the project .env
load_dotenv(Path(__file__).resolve().parent / ".env")

from django.core.management import execute_from_command_line


def main() -> None:
    """Run a management command, defaulting to development settings."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings.development")
    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
