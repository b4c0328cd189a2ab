"""Run the blog service: python -m apps.blog"""
import logging

import uvicorn

from apps.blog import config


def main() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "apps.blog.main:app",
        host=config.HOST,
        port=config.PORT,
        log_config=None,
        access_log=False,
    )


if __name__ == "__main__":
    main()
