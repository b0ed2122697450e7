"""
app.py

TOTP enrollment and verification API using Flask and pydantic.

Settings and logging are only touched by ``create_app()`` and the ``__main__``
entrypoint, so importing the engine as a library leaves both alone.
"""

import logging
import logging.config
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from .config import Settings, get_settings
from .engine import TotpEngine
from .errors import EntropySourceError, InvalidSecretFormat, MalformedCode
from .provisioning import provisioning_uri, qrcode_image_url
from .schemas import CodesRequest, SecretRequest, VerifyRequest
from .secret import SecretStore

logger = logging.getLogger(__name__)

api = Blueprint("totp", __name__)


# ---------------------------
# Configuration
# ---------------------------
def configure_logging(settings: Settings) -> None:
    log_level = "DEBUG" if settings.debug else settings.log_level.upper()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": log_level,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": log_level,
        },
    })


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or get_settings()

    app = Flask(__name__)
    app.config["TOTP_SETTINGS"] = settings
    app.config["TOTP_CONFIG"] = settings.totp_config()
    app.config["SECRET_STORE"] = SecretStore(length=settings.secret_length)
    app.register_blueprint(api)
    return app


# ---------------------------
# Helper Functions
# ---------------------------
def engine_for(secret: str) -> TotpEngine:
    store = current_app.config["SECRET_STORE"]
    return TotpEngine(store.decode(secret), current_app.config["TOTP_CONFIG"])


def parse_body(model):
    return model.model_validate(request.get_json(silent=True) or {})


# ---------------------------
# Error Handlers
# ---------------------------
@api.app_errorhandler(ValidationError)
def handle_validation_error(exc: ValidationError):
    return jsonify({"error": "Invalid request", "details": [err["msg"] for err in exc.errors()]}), 400


@api.app_errorhandler(InvalidSecretFormat)
def handle_invalid_secret(exc: InvalidSecretFormat):
    return jsonify({"error": "Invalid secret", "details": str(exc)}), 400


@api.app_errorhandler(MalformedCode)
def handle_malformed_code(exc: MalformedCode):
    return jsonify({"error": "Malformed code", "details": str(exc)}), 400


@api.app_errorhandler(EntropySourceError)
def handle_entropy_error(exc: EntropySourceError):
    logger.critical("Refusing to issue secret: %s", exc)
    return jsonify({"error": "Secure randomness unavailable"}), 503


@api.app_errorhandler(HTTPException)
def handle_http_error(exc: HTTPException):
    return jsonify({"error": exc.name, "details": exc.description}), exc.code


# ---------------------------
# Flask Routes
# ---------------------------
@api.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"})


@api.route("/secrets", methods=["POST"])
def create_secret():
    body = parse_body(SecretRequest)
    settings = current_app.config["TOTP_SETTINGS"]
    config = current_app.config["TOTP_CONFIG"]
    secret = current_app.config["SECRET_STORE"].generate()
    logger.info("Issued new %d-byte secret", len(secret.raw))

    result = {"secret": secret.text}
    if body.label:
        issuer = body.issuer or settings.issuer
        result["provisioning_uri"] = provisioning_uri(secret, body.label, issuer=issuer, config=config)
        result["qrcode_image_url"] = qrcode_image_url(
            secret, body.label, issuer=issuer, size=settings.qr_size, config=config
        )
    return jsonify(result), 201


@api.route("/verify", methods=["POST"])
def verify():
    body = parse_body(VerifyRequest)
    valid = engine_for(body.secret).is_valid(body.code)
    if not valid:
        logger.info("Rejected TOTP code")
    return jsonify({"valid": valid})


@api.route("/codes", methods=["POST"])
def codes():
    body = parse_body(CodesRequest)
    return jsonify(engine_for(body.secret).current_codes().model_dump())


if __name__ == "__main__":
    settings = get_settings()
    configure_logging(settings)
    create_app(settings).run(debug=settings.debug)
