#!/usr/bin/env python
"""
Serve the PrintHub API with uvicorn.

Usage:
    python scripts/run_api.py

Environment:
    PRINTHUB_HOST     bind address (default 0.0.0.0)
    PRINTHUB_PORT     port (default 5000)
    PRINTHUB_RELOAD   set to 1 to restart on code changes
"""
import os
import sys
from pathlib import Path

import uvicorn

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from printhub.config.settings import get_settings


def main():
    settings = get_settings()
    host = os.environ.get('PRINTHUB_HOST', '0.0.0.0')
    port = int(os.environ.get('PRINTHUB_PORT', '5000'))

    print(f"Starting PrintHub API on {host}:{port} (data in {settings.data_dir})")
    uvicorn.run(
        "printhub.api.main:app",
        host=host,
        port=port,
        reload=os.environ.get('PRINTHUB_RELOAD') == '1',
        reload_dirs=[str(src_path)],
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
