import argparse
import logging
import os

import uvicorn

from tourney.settings import configure_logging, load_settings

logger = logging.getLogger(__name__)
APP_MODULE = "tourney.main:app"
DEFAULT_PORT = 8000


def _port_from_env() -> int:
    for key in ("APP_PORT", "PORT"):
        value = os.getenv(key)
        if not value:
            continue
        try:
            return int(value)
        except ValueError:
            logger.warning("Ignoring %s=%s (not an integer)", key, value)
    return DEFAULT_PORT


def _ssl_kwargs() -> dict[str, str]:
    cert = os.getenv("SSL_CERT_FILE")
    key = os.getenv("SSL_KEY_FILE")
    if not (cert or key):
        return {}
    if not (cert and key):
        logger.warning("SSL_CERT_FILE and SSL_KEY_FILE must both be set, serving plain HTTP")
        return {}
    kwargs = {"ssl_certfile": cert, "ssl_keyfile": key}
    if os.getenv("SSL_KEY_PASSWORD"):
        kwargs["ssl_keyfile_password"] = os.environ["SSL_KEY_PASSWORD"]
    return kwargs


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the standings and scoring API.")
    parser.add_argument("--host", default=os.getenv("APP_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=_port_from_env())
    parser.add_argument("--reload", action="store_true", help="Restart on code changes.")
    args = parser.parse_args()

    settings = load_settings()
    configure_logging(settings.log_level)
    ssl_kwargs = _ssl_kwargs()
    logger.info(
        "Serving %s on %s://%s:%d (standings view %s, tz %s)",
        APP_MODULE,
        "https" if ssl_kwargs else "http",
        args.host,
        args.port,
        settings.default_standings_view,
        settings.tournament_tz,
    )
    uvicorn.run(
        APP_MODULE,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=os.getenv("UVICORN_LOG_LEVEL", settings.log_level.lower()),
        **ssl_kwargs,
    )


if __name__ == "__main__":
    main()
