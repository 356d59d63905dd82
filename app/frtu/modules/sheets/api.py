from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from app.frtu.errors import NotFoundError
from app.frtu.modules.sheets.client import SheetCredentials
from app.frtu.modules.sheets.service import append_log_row, build_log_row, read_directory, select_log_worksheet
from app.frtu.utils import display_zone, format_thai_timestamp

logger = logging.getLogger(__name__)

bp = Blueprint("sheets", __name__)


def _open(creds: SheetCredentials):
    opener = current_app.extensions["frtu.open_spreadsheet"]
    return opener(creds, current_app.config["GOOGLE_SHEET_ID"])


@bp.route("/log-to-sheet", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
def log_to_sheet():
    if request.method != "POST":
        return jsonify({"error": "Method not allowed"}), 405

    creds = SheetCredentials.from_config(current_app.config)
    if not creds.complete:
        logger.error("Sheet logging called without Google credentials configured")
        return jsonify({"error": "Server misconfigured: Missing Google Credentials"}), 500

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        body = {}

    try:
        spreadsheet = _open(creds)
        worksheet = select_log_worksheet(spreadsheet, current_app.config["LOG_SHEET_TITLE"])
        now = datetime.now(timezone.utc)
        timestamp = format_thai_timestamp(now, display_zone(current_app.config.get("DISPLAY_TIMEZONE")))
        append_log_row(worksheet, build_log_row(body, timestamp))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        logger.exception("Sheet logging error")
        return jsonify({"error": str(e)}), 500

    return jsonify({"success": True})


@bp.get("/get-employees")
def get_employees():
    creds = SheetCredentials.from_config(current_app.config)
    if not creds.complete:
        # Readers degrade to an empty list so the UI still works unconfigured.
        logger.warning("Missing Google credentials; returning empty employee list")
        return jsonify([])

    try:
        spreadsheet = _open(creds)
        names = read_directory(
            spreadsheet,
            current_app.config["DIRECTORY_SHEET_GID"],
            current_app.config["DIRECTORY_RANGE"],
        )
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        logger.exception("Employee directory read error")
        return jsonify({"error": str(e)}), 500

    return jsonify(names)
