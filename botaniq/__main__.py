"""Run the service with uvicorn: ``python -m botaniq``."""

from __future__ import annotations

import uvicorn

from botaniq.config import load_config
from botaniq.logging_setup import configure_logging
from botaniq.main import create_app


def main() -> None:
    configure_logging()
    try:
        config = load_config()
    except ValueError as exc:
        # Includes pydantic's ValidationError; load_config has already logged it
        raise SystemExit(f"botaniq: invalid configuration: {exc}") from exc
    app = create_app(config=config)
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_config=None)


if __name__ == "__main__":
    main()
