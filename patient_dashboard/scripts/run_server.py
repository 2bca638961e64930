#!/usr/bin/env python3
"""
Backend server runner script.

This script starts the FastAPI server with the configuration read from the
environment (and .env).
"""

import sys

from patient_dashboard.common.logger import app_logger
from patient_dashboard.main import main as run

logger = app_logger.getChild("scripts.run_server")


def main():
    """Run the backend server."""
    try:
        run()
    except OSError as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
