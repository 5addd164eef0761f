"""Run the API server: python -m newswire"""

import logging

import uvicorn

from .config import config


def main() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("newswire.server:app", host="127.0.0.1", port=config.PORT)


if __name__ == "__main__":
    main()
