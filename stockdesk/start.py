#!/usr/bin/env python3
"""
StockDesk - Start the API server
Run: python start.py [--port 8000] [--no-reload]
"""

import argparse
import os
import subprocess
import sys
from pathlib import Path


# Colors for terminal output
class Colors:
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    CYAN = '\033[96m'
    WHITE = '\033[97m'
    RESET = '\033[0m'


def print_colored(message, color=Colors.WHITE):
    """Print colored message"""
    print(f"{color}{message}{Colors.RESET}")


def start_backend(project_root, port=8000, reload=True):
    """Start the FastAPI backend server"""
    backend_dir = project_root / "backend"
    env = os.environ.copy()
    env["PYTHONPATH"] = str(backend_dir)

    cmd = [
        sys.executable,
        "-m", "uvicorn",
        "app.main:app",
        "--host", "0.0.0.0",
        "--port", str(port),
    ]
    if reload:
        cmd.append("--reload")

    return subprocess.Popen(
        cmd,
        cwd=str(backend_dir),
        env=env,
        stdout=None,  # Show output in console
        stderr=subprocess.STDOUT,
    )


def main():
    parser = argparse.ArgumentParser(description="Start the StockDesk API")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload")
    args = parser.parse_args()

    project_root = Path(__file__).resolve().parent
    if not (project_root / ".env").exists() and not (project_root / "backend" / ".env").exists():
        print_colored("No .env file found; using defaults (SQLite at ./stockdesk.db)", Colors.YELLOW)

    print_colored("Starting StockDesk API", Colors.GREEN)
    print_colored(f"   Backend API:    http://localhost:{args.port}", Colors.WHITE)
    print_colored(f"   Health Check:   http://localhost:{args.port}/health", Colors.WHITE)
    print_colored(f"   Import template: http://localhost:{args.port}/api/products/bulk-import/template", Colors.WHITE)
    print_colored("Press Ctrl+C to stop", Colors.YELLOW)

    proc = start_backend(project_root, args.port, reload=not args.no_reload)
    try:
        sys.exit(proc.wait())
    except KeyboardInterrupt:
        print_colored("Stopping server...", Colors.YELLOW)
        proc.terminate()
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
        print_colored("Server stopped", Colors.GREEN)


if __name__ == "__main__":
    main()
