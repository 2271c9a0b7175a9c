"""
Entry point for the spline service.

Running this script with ``python run.py`` will start the FastAPI
server that exposes the spline engine over HTTP.  The application
defined in ``backend/splines/main.py`` is imported after adjusting the
Python path to include the backend directory.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import uvicorn

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def main() -> None:
    """Run the Uvicorn server hosting the spline service."""
    # Ensure ``splines`` is importable as a top-level package, the same way
    # the tests import it.
    backend_dir = Path(__file__).resolve().parent / "backend"
    if str(backend_dir) not in sys.path:
        sys.path.append(str(backend_dir))

    from splines.main import app  # type: ignore

    host = os.getenv("SPLINE_HOST", "0.0.0.0")
    port = int(os.getenv("SPLINE_PORT", "8000"))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
