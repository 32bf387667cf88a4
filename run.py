#!/usr/bin/env python3
"""
Banking Services Entry Point

Starts the FastAPI server with the client, account and movement services.
Host, port and storage backend come from BANKING_* environment variables.
"""

import sys

from banking_services.api import run_server
from banking_services.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("Starting Banking Services...")
    print(f"Storage backend: {config.storage_type}")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server(debug="--reload" in sys.argv)
    except KeyboardInterrupt:
        print("\nShutting down Banking Services...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
