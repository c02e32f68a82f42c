#!/usr/bin/env python3
"""
Script to run the Linear transition action.

Usage:
    python run_transition.py [config.json]

Without a config file, inputs are read from INPUT_* environment variables
as set by the GitHub Actions runner.
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add the current directory to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from linear_transition.orchestrator import main


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main(sys.argv[1:])))
    except KeyboardInterrupt:
        logging.info("Linear transition stopped by user")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Action failed: {e}")
        sys.exit(1)
