from __future__ import annotations

import os

import uvicorn

from offchain.env import load_dotenv_if_present
from offchain.structured_logging import configure_structured_logging


def main() -> None:
    # Load .env early so OFFCHAIN_* vars exist before anything reads them.
    load_dotenv_if_present()
    configure_structured_logging()

    # Import after dotenv load (prevents "config read before env" surprises)
    from offchain.api.app import create_app

    host = os.getenv("OFFCHAIN_API_HOST", "127.0.0.1")
    port = int(os.getenv("OFFCHAIN_API_PORT", "8080"))

    uvicorn.run(create_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
