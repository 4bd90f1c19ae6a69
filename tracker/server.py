"""
Run the Test Tracker server with uvicorn.
"""
import logging
import os
import ssl
from logging.handlers import TimedRotatingFileHandler
from typing import Optional, Tuple

import uvicorn

from tracker.core.config import settings

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s %(levelname)s:\t%(name)s\t%(message)s'


def configure_logging(log_dir: Optional[str] = None) -> None:
    """
    Send log messages to the console and, if ``log_dir`` is set, to a
    ``server.log`` file in that directory rotated daily.
    """
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, handlers=[logging.StreamHandler()])
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    logging.getLogger("uvicorn").setLevel(logging.INFO)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = TimedRotatingFileHandler(os.path.join(log_dir, "server.log"), when="midnight")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)


def resolve_tls(certfile: Optional[str], keyfile: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Return the certificate and key to serve with, or ``(None, None)`` to fall
    back to plaintext HTTP when either is missing or cannot be loaded.
    """
    if not certfile or not keyfile:
        logger.warning("No TLS certificate configured, serving plain HTTP")
        return None, None
    try:
        ssl.create_default_context(ssl.Purpose.CLIENT_AUTH).load_cert_chain(certfile, keyfile)
    except (OSError, ssl.SSLError) as e:
        logger.warning(f"Failed to load TLS certificate ({e}), serving plain HTTP")
        return None, None
    return certfile, keyfile


def run() -> None:
    """Create and run the server indefinitely."""
    configure_logging(settings.LOG_DIR)
    certfile, keyfile = resolve_tls(settings.SSL_CERTFILE, settings.SSL_KEYFILE)
    logger.info(f"Initialising server on {settings.SERVER_HOST}:{settings.PORT}")
    uvicorn.run(
        "tracker.main:app",
        host=settings.SERVER_HOST,
        port=settings.PORT,
        ssl_certfile=certfile,
        ssl_keyfile=keyfile,
        log_config=None,
    )


if __name__ == "__main__":
    run()
