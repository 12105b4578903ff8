"""Flask request handlers: authenticate, call VaultService, render JSON."""

from __future__ import annotations

import logging
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from drivevault.config import Settings
from drivevault.errors import DriveVaultError
from drivevault.identity import CallerIdentity, FirebaseTokenVerifier, RequestAuthenticator
from drivevault.models import UploadSource
from drivevault.service import VaultService

logger = logging.getLogger(__name__)

EXTENSION_KEY = "drivevault"

bp = Blueprint("drivevault", __name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    service: Optional[VaultService] = None,
    authenticator: Optional[RequestAuthenticator] = None,
) -> Flask:
    """
    Application factory.

    `service` and `authenticator` default to the real Drive / Firebase
    collaborators built from `settings`; tests inject their own.
    """
    if settings is None:
        settings = Settings.from_env()
    if service is None:
        service = VaultService.from_settings(settings)
    if authenticator is None:
        verifier = FirebaseTokenVerifier(settings.require_firebase_project_id())
        authenticator = RequestAuthenticator(verifier, settings.isolation_policy)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_bytes
    app.extensions[EXTENSION_KEY] = {
        "settings": settings,
        "service": service,
        "authenticator": authenticator,
    }

    CORS(app, origins=list(settings.cors_origins), supports_credentials=True)
    app.register_blueprint(bp)
    app.register_error_handler(DriveVaultError, _handle_vault_error)
    app.register_error_handler(HTTPException, _handle_http_exception)
    app.register_error_handler(Exception, _handle_unexpected)

    logger.info(
        "drivevault app created (isolation=%s, master=%s)",
        settings.isolation_policy.value,
        settings.master_folder_id,
    )
    return app


def _service() -> VaultService:
    return current_app.extensions[EXTENSION_KEY]["service"]


def _caller() -> CallerIdentity:
    authenticator: RequestAuthenticator = current_app.extensions[EXTENSION_KEY]["authenticator"]
    return authenticator.authenticate(
        request.headers.get("Authorization"),
        request.headers.get("X-User-Id"),
    )


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


# ----------------------------
# Routes
# ----------------------------
@bp.post("/initializeUser")
def initialize_user():
    caller = _caller()
    record = _service().initialize_user(caller)
    return jsonify({"success": True, "folderId": record.folder_id})


@bp.post("/uploadFile")
def upload_file():
    caller = _caller()
    uploads = [
        UploadSource(filename=f.filename or "", stream=f.stream, mime_type=f.mimetype)
        for key in request.files
        for f in request.files.getlist(key)
    ]
    items = _service().upload_files(caller, uploads, folder_id=request.args.get("folderId"))
    return jsonify({"success": True, "files": [item.to_dict() for item in items]})


@bp.get("/listFiles")
def list_files():
    caller = _caller()
    listing = _service().list_files(
        caller,
        folder_id=request.args.get("folderId"),
        view=request.args.get("view"),
        sort_field=request.args.get("sortField"),
        sort_order=request.args.get("sortOrder"),
    )
    return jsonify(
        {
            "files": [item.to_dict() for item in listing.files],
            "currentFolderId": listing.current_folder_id,
            "rootFolderId": listing.root_folder_id,
        }
    )


@bp.post("/createFolder")
def create_folder():
    caller = _caller()
    body = _json_body()
    item = _service().create_folder(caller, body.get("name"), parent_id=body.get("parentId"))
    return jsonify(item.to_dict())


@bp.delete("/deleteItem")
def delete_item():
    caller = _caller()
    _service().delete_item(caller, request.args.get("fileId"))
    return jsonify({"success": True})


@bp.post("/restoreItem")
def restore_item():
    caller = _caller()
    _service().restore_item(caller, request.args.get("fileId"))
    return jsonify({"success": True})


@bp.post("/renameItem")
def rename_item():
    caller = _caller()
    body = _json_body()
    _service().rename_item(caller, body.get("fileId"), body.get("newName"))
    return jsonify({"success": True})


@bp.get("/health")
def health():
    return jsonify({"status": "OK"})


# ----------------------------
# Error translation
# ----------------------------
def _handle_vault_error(exc: DriveVaultError):
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.path, exc, exc_info=exc.cause)
    else:
        logger.info("%s %s rejected (%d): %s", request.method, request.path, exc.http_status, exc)
    return jsonify({"error": exc.message}), exc.http_status


def _handle_http_exception(exc: HTTPException):
    return jsonify({"error": exc.description or exc.name}), exc.code or 500


def _handle_unexpected(exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"error": "Internal server error"}), 500
