import logging
import sys

import uvicorn

from paylink.config import Settings
from paylink.credentials import MissingCredentialsError, load
from paylink.main import create_app

logger = logging.getLogger("paylink")


def main() -> None:
    settings = Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        credentials = load(settings)
    except MissingCredentialsError as exc:
        logger.error("%s Exiting.", exc)
        sys.exit(1)

    application = create_app(settings, credentials)
    logger.info("Server listening on %d", settings.port)
    uvicorn.run(application, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
