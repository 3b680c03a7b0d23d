"""
GIGMASTER - Narrative Engine v1.0
Game server. The web UI and the MCP bridge both talk to this process.

Run:  python gigmaster.py
Open: http://localhost:8000/docs
"""

import os
import sys
import uvicorn

# When running under pythonw.exe, stdout/stderr are None; redirect to devnull
if sys.stdout is None:
    sys.stdout = open(os.devnull, 'w')
if sys.stderr is None:
    sys.stderr = open(os.devnull, 'w')

# Ensure engine directory is on the path
ENGINE_DIR = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, ENGINE_DIR)

import config
from web.routes import app, init_game


def main():
    config.setup_logging()
    init_game(config.DATA_DIR)

    print("=" * 50)
    print("  GIGMASTER - Narrative Engine v1.0")
    print("=" * 50)
    print(f"  Server: http://localhost:{config.PORT}")
    print(f"  Data:   {config.DATA_DIR}")
    print(f"  Logs:   {config.LOG_DIR}")
    print()
    print("  Connect an MCP client to mcp_server.py for tool access.")
    print("  Press Ctrl+C to stop.")
    print("=" * 50)
    print()

    # Start server (blocking)
    uvicorn.run(app, host="0.0.0.0", port=config.PORT, log_level="warning")


if __name__ == "__main__":
    main()
