"""Command starting the ambulance waiting-list web service."""

from __future__ import annotations

import argparse
import logging
import os
from datetime import timedelta
from typing import Any, Mapping, Sequence

from flask import Flask, request
from flask import Response as FlaskResponse

from .db_service import MongoService
from .routers import create_app

log = logging.getLogger(__name__)

DEFAULT_PORT = "8080"
ALLOW_METHODS = ("GET", "PUT", "POST", "DELETE", "PATCH")
ALLOW_HEADERS = ("Origin", "Authorization", "Content-Type")
CORS_MAX_AGE = timedelta(hours=12)


def _install_cors(app: Flask) -> None:
    max_age = str(int(CORS_MAX_AGE.total_seconds()))

    @app.before_request
    def preflight() -> Any:
        if request.method == "OPTIONS" and request.headers.get("Origin"):
            response = FlaskResponse(status=204)
            response.headers["Access-Control-Allow-Origin"] = "*"
            response.headers["Access-Control-Allow-Methods"] = ",".join(ALLOW_METHODS)
            response.headers["Access-Control-Allow-Headers"] = ",".join(ALLOW_HEADERS)
            response.headers["Access-Control-Max-Age"] = max_age
            return response
        return None

    @app.after_request
    def allow_origin(response: FlaskResponse) -> FlaskResponse:
        if request.headers.get("Origin"):
            response.headers["Access-Control-Allow-Origin"] = "*"
        return response


def build_app(environ: Mapping[str, str] | None = None, db: Any = None) -> Flask:
    """Create the configured application; the store defaults to MongoDB."""
    environ = os.environ if environ is None else environ
    if db is None:
        db = MongoService()
    app = create_app(db)
    app.config["AMBULANCE_API_PORT"] = environ.get("AMBULANCE_API_PORT") or DEFAULT_PORT
    environment = environ.get("AMBULANCE_API_ENVIRONMENT", "")
    debug_mode = environment.casefold() != "production"
    app.config["DEBUG_MODE"] = debug_mode
    if debug_mode:
        app.logger.setLevel(logging.DEBUG)
    _install_cors(app)
    return app


def main(argv: Sequence[str] | None = None) -> int:
    """Run the HTTP server until interrupted."""
    parser = argparse.ArgumentParser(
        description="Serve the ambulance waiting-list API.",
        epilog="Configured through AMBULANCE_API_* environment variables.",
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    log.info("Server started")
    db = MongoService()
    try:
        app = build_app(os.environ, db)
        app.run(host="0.0.0.0", port=int(app.config["AMBULANCE_API_PORT"]))
    finally:
        db.disconnect()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())