"""Run the Tour Operations Back-Office application."""
import os
import sys
from pathlib import Path

import uvicorn

# Add the project root to the Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))


def main():
    """Run the FastAPI application."""
    host = os.environ.get("BACKOFFICE_HOST", "0.0.0.0")
    port = int(os.environ.get("BACKOFFICE_PORT", "8000"))
    reload = os.environ.get("BACKOFFICE_RELOAD", "true").lower() in ("1", "true", "yes")

    print()
    print("Starting Tour Operations Back-Office...")
    print(f"Open http://localhost:{port}/docs in your browser")
    print("Press Ctrl+C to stop the server")
    print()

    uvicorn.run(
        "backoffice.main:app",
        host=host,
        port=port,
        reload=reload
    )


if __name__ == "__main__":
    main()
