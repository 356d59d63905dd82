import logging

from flask import Flask, jsonify, request
from dotenv import load_dotenv

from app.frtu.background import BackgroundDispatcher
from app.frtu.config import load_config
from app.frtu.db import init_db, teardown_db_session
from app.frtu.errors import DeserializationError, FrtuError, NotFoundError, ValidationError
from app.frtu.mirror import SheetMirror, SheetMirrorClient
from app.frtu.modules.devices.admin import bp as devices_bp
from app.frtu.modules.directory.service import DirectoryClient
from app.frtu.modules.sheets.api import bp as sheets_bp
from app.frtu.modules.sheets.client import open_spreadsheet
from app.frtu.routes import bp as routes_bp
from app.frtu.utils import display_zone


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    app.json.ensure_ascii = False

    logging.getLogger("app.frtu").setLevel(app.config["LOG_LEVEL"])

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")
    # Fail at boot rather than on the first export.
    display_zone(app.config.get("DISPLAY_TIMEZONE"))

    init_db(app)

    timeout = app.config["HTTP_TIMEOUT_SECONDS"]
    dispatcher = BackgroundDispatcher(max_workers=app.config["MIRROR_WORKERS"])
    mirror_client = SheetMirrorClient(app.config["MIRROR_URL"], timeout) if app.config["MIRROR_URL"] else None
    if mirror_client is None:
        app.logger.info("MIRROR_URL not set; audit entries stay local only")
    app.extensions["frtu.dispatcher"] = dispatcher
    app.extensions["frtu.mirror"] = SheetMirror(mirror_client, dispatcher)
    app.extensions["frtu.directory_client"] = (
        DirectoryClient(app.config["DIRECTORY_URL"], timeout) if app.config["DIRECTORY_URL"] else None
    )
    app.extensions["frtu.open_spreadsheet"] = open_spreadsheet

    app.register_blueprint(routes_bp)
    app.register_blueprint(devices_bp)
    app.register_blueprint(sheets_bp, url_prefix="/api")

    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(ValidationError)
    def _err_validation(e: ValidationError):
        return jsonify({"error": str(e), "errors": e.errors}), 400

    @app.errorhandler(NotFoundError)
    def _err_not_found(e: NotFoundError):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(DeserializationError)
    def _err_corrupt(e: DeserializationError):
        # Never reseed over unreadable data; an operator has to look at it.
        app.logger.error("Record store corrupted (key=%s): %s", e.key, e)
        return jsonify({"error": "Stored data is unreadable; contact an administrator."}), 500

    @app.errorhandler(FrtuError)
    def _err_frtu(e: FrtuError):
        app.logger.exception("Unhandled application error: %s", e)
        return jsonify({"error": str(e)}), 500

    @app.errorhandler(404)
    def _err_404(e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def _err_405(e):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def _err_500(e):
        app.logger.exception("Unhandled 500 on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
