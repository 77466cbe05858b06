"""Run the race planner API with uvicorn.

Run with:  python3 serve.py
Host and port come from HOST / PORT (default 127.0.0.1:8000).
"""

from __future__ import annotations

import os

import uvicorn

from api.main import create_app


def main() -> None:
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run(create_app(), host=host, port=port, log_level="warning")


if __name__ == "__main__":
    main()
