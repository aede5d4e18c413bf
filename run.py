"""
Entry point for the quantity takeoff service.

Running this script with ``python run.py`` starts the FastAPI server
exposing the scene registration, quantity takeoff and element metadata
endpoints.  The application defined in ``backend/qto/main.py`` is
imported after adjusting the Python path to include the backend
directory.
"""

from __future__ import annotations

import sys
from pathlib import Path

import logging
import uvicorn


def main() -> None:
    """Run the Uvicorn server hosting the takeoff service."""
    # Make ``qto`` importable when the package has not been installed.
    backend_dir = Path(__file__).resolve().parent / "backend"
    if str(backend_dir) not in sys.path:
        sys.path.append(str(backend_dir))

    from qto.config import LOG_LEVEL
    from qto.main import app

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # Bind to all interfaces on port 8000 by default.
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
