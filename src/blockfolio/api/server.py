"""
ASGI entry point for the Blockfolio API.

Loads `.env` before the application factory runs so the settings singleton
sees the configured storage directory and key.

Usage
-----
Run via the module entry point:
    $ python -m blockfolio.api.server

Or via uvicorn directly:
    $ uvicorn blockfolio.api.server:app --reload
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from blockfolio.api.app import create_app
from blockfolio.core.settings import load_settings

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #

load_dotenv(dotenv_path=Path(".env"))

# Factory invocation
app = create_app()


def main() -> None:
    """Run the API server locally for development."""
    cfg = load_settings()
    print(f"{'[ Blockfolio ]':=^60}")
    print(f"{'environment':<16} : {cfg.environment}")
    print(f"{'storage dir':<16} : {cfg.storage_dir}")
    print(f"{'storage key':<16} : {cfg.storage_key}")
    print(f"{'='*60}\n")

    uvicorn.run(
        "blockfolio.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=cfg.is_dev,
        log_level=cfg.log_level.lower(),
    )


if __name__ == "__main__":
    main()
