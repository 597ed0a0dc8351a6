"""Entry point: ``python -m guest_knows``."""

import logging

import uvicorn

from guest_knows.config import GuestKnowsConfig
from guest_knows.logging import configure_logging


def main() -> None:
    config = GuestKnowsConfig()
    configure_logging(
        level=logging.getLevelNamesMapping().get(config.api.log_level.upper(), logging.INFO),
        json_output=config.api.log_json,
    )

    uvicorn.run(
        "guest_knows.api.app:create_app",
        factory=True,
        host=config.api.host,
        port=config.api.port,
        log_level=config.api.log_level.lower(),
    )


if __name__ == "__main__":
    main()
