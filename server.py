# server.py
import os
import logging

from flask import Flask, request, jsonify, send_file, redirect
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from application.dto.store_dto import FileMetadata, ReasonCode, StandardResult
from infrastructure.web.store_registry import (
    get_link_store,
    get_resource_store,
    get_settings,
)
from shortener import codec
from shortener.errors import DeleteFailed
from shortener.logs import configure_logging
from shortener.stores import resolve_any
from shortener.utils import parse_ttl_millis, sanitize_filename, validate_target_url

# ── Logging ──────────────────────────────────────────────────────────
_settings = get_settings()
configure_logging(_settings.log_level, _settings.log_file)
logger = logging.getLogger("shortener.server")

# ── Flask app ────────────────────────────────────────────────────────
app = Flask(__name__)

app.config["MAX_CONTENT_LENGTH"] = _settings.max_upload_bytes

_cors_origins = [
    o.strip() for o in os.environ.get("SHORTENER_CORS_ORIGINS", "*").split(",") if o.strip()
]
CORS(app, resources={r"/api/*": {"origins": _cors_origins}})

app.config["SECRET_KEY"] = os.environ.get("FLASK_SECRET_KEY") or os.urandom(32)

# ── API Blueprint Registration ─────────────────────────────────────────
from adapters.web.api_v1_blueprint import api_v1
app.register_blueprint(api_v1)

import adapters.web.openapi_spec as openapi_spec
@app.route("/api/v1/openapi.json")
def get_openapi_spec():
    return jsonify(openapi_spec.OPENAPI_SPEC)

# ════════════════════════════════════════════════════════════════════
# Result → HTTP helpers
# ════════════════════════════════════════════════════════════════════

HTTP_STATUS: dict[ReasonCode, int] = {
    ReasonCode.SUCCESS:              200,
    ReasonCode.NOT_FOUND:            404,
    ReasonCode.DANGLING_REFERENCE:   410,
    ReasonCode.GENERATION_EXHAUSTED: 503,
    ReasonCode.INVALID_REQUEST:      400,
    ReasonCode.INTERNAL_ERROR:       500,
}


def _base_url() -> str:
    """Configured public URL, or the host the request came in on."""
    return get_settings().public_base_url or request.host_url.rstrip("/")


def _respond(result: StandardResult, created: bool = False):
    status: int = 201 if (created and result.ok) else HTTP_STATUS[result.reason_code]
    response = jsonify(result.to_dict())
    response.status_code = status
    if result.reason_code is ReasonCode.GENERATION_EXHAUSTED:
        response.headers["Retry-After"] = "1"
    return response


def _send_stored_file(result: StandardResult, as_attachment: bool):
    """Stream the bytes behind a successful file result."""
    fields: dict = result.record
    store = get_resource_store()
    try:
        return send_file(
            store.reconciler.medium.path_for(fields["storageKey"]),
            mimetype=fields["mimeType"],
            as_attachment=as_attachment,
            download_name=fields["originalName"],
        )
    except FileNotFoundError:
        # Removed between verification and streaming
        logger.warning("file vanished before streaming token=%s", fields["token"])
        return _respond(codec.encode_dangling(fields["token"]))


# ════════════════════════════════════════════════════════════════════
# Operations shared by the legacy routes and /api/v1
# ════════════════════════════════════════════════════════════════════


def reject(reason: str):
    """400 invalid_request response for malformed input."""
    return _respond(codec.encode_invalid(reason))


def create_link(raw_link, raw_ttl):
    try:
        target_url: str = validate_target_url(raw_link)
        ttl_seconds = parse_ttl_millis(raw_ttl)
    except ValueError as e:
        return _respond(codec.encode_invalid(str(e)))

    result = get_link_store().create_link(target_url, ttl_seconds, base_url=_base_url())
    if result.ok:
        logger.info("link created token=%s ip=%s", result.record["token"], request.remote_addr)
    return _respond(result, created=True)


def find_link(token: str):
    return _respond(get_link_store().resolve_link(token, base_url=_base_url()))


def upload_file():
    if "file" not in request.files:
        return _respond(codec.encode_invalid("No file uploaded. Send it as multipart field 'file'."))

    try:
        ttl_seconds = parse_ttl_millis(request.form.get("ttl") or request.args.get("ttl"))
    except ValueError as e:
        return _respond(codec.encode_invalid(str(e)))

    upload = request.files["file"]
    store = get_resource_store()
    medium = store.reconciler.medium

    storage_key, size = medium.save(upload.stream)
    if size == 0:
        medium.delete(storage_key)
        return _respond(codec.encode_invalid("Empty file uploaded."))

    metadata = FileMetadata(
        storage_key=storage_key,
        original_name=sanitize_filename(upload.filename or "") or "upload",
        mime_type=upload.mimetype or "application/octet-stream",
    )
    result = store.create_file_record(metadata, ttl_seconds, base_url=_base_url())
    if not result.ok:
        try:
            store.reconciler.delete(storage_key)
        except DeleteFailed as e:
            logger.warning("orphaned upload key=%s: %s", storage_key, e)
        return _respond(result)

    logger.info(
        "upload accepted token=%s size=%dB ip=%s",
        result.record["token"], size, request.remote_addr,
    )
    return _respond(result, created=True)


def find_file(token: str):
    return _respond(get_resource_store().resolve_file_record(token, base_url=_base_url()))


# ════════════════════════════════════════════════════════════════════
# Routes
# ════════════════════════════════════════════════════════════════════

@app.route("/api/hash/create", methods=["GET"])
def create_hash():
    """
    GET /api/hash/create?link=<url>&ttl=<ms>
    Returns: StandardResult with the short address.
    """
    return create_link(request.args.get("link"), request.args.get("ttl"))


@app.route("/api/hash/find/<path:token>", methods=["GET"])
def find_hash(token: str):
    """GET /api/hash/find/<token> — link record as JSON."""
    return find_link(token)


@app.route("/api/hash/file/upload", methods=["POST"])
def upload_hash_file():
    """
    POST /api/hash/file/upload
    Form fields:
      - file : the file (multipart)
      - ttl  : optional time-to-live in milliseconds
    """
    return upload_file()


@app.route("/api/hash/file/<path:token>", methods=["GET"])
def get_hash_file(token: str):
    """
    GET /api/hash/file/<token>?dl=0|1
    Streams the file inline, or as an attachment when dl=1.
    """
    result = get_resource_store().resolve_file_record(token, base_url=_base_url())
    if not result.ok:
        return _respond(result)
    return _send_stored_file(result, as_attachment=request.args.get("dl") == "1")


@app.route("/<path:token>", methods=["GET"])
def resolve_token(token: str):
    """
    GET /<token>
    Redirects to a link, streams a file, or returns 404. Links win when a
    token exists in both stores.
    """
    kind, result = resolve_any(get_link_store(), get_resource_store(), token, _base_url())
    if kind == "link":
        return redirect(result.record["link"])
    if kind == "file" and result.ok:
        return _send_stored_file(result, as_attachment=request.args.get("dl") == "1")
    return _respond(result)


# ════════════════════════════════════════════════════════════════════
# Error handlers & Security headers
# ════════════════════════════════════════════════════════════════════

@app.errorhandler(413)
def request_entity_too_large(e):
    limit_mb: int = get_settings().max_upload_mb
    return _respond(codec.encode_invalid(f"File too large. Maximum size is {limit_mb} MB.")), 413


@app.errorhandler(404)
def not_found(e):
    path = request.path
    suspicious = any(p in path for p in ["..", "etc", "passwd", "wp-admin", ".env"])
    if suspicious:
        logger.warning("suspicious 404 ip=%s path=%s", request.remote_addr, path)
    return jsonify({"ok": False, "reasonCode": ReasonCode.NOT_FOUND.value, "reasonText": "Not found."}), 404


@app.errorhandler(Exception)
def handle_exception(e):
    """Generic handler — never leak internal details to client."""
    if isinstance(e, HTTPException):
        return jsonify({
            "ok": False,
            "reasonCode": ReasonCode.INVALID_REQUEST.value,
            "reasonText": e.description,
        }), e.code
    logger.error("unhandled exception: %s", e, exc_info=True)
    return jsonify({
        "ok": False,
        "reasonCode": ReasonCode.INTERNAL_ERROR.value,
        "reasonText": "An internal error occurred.",
    }), 500


@app.after_request
def set_security_headers(response):
    """Add security headers to every response."""
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    # Uploaded files are served from this origin; never let them run scripts
    response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'; sandbox"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# ════════════════════════════════════════════════════════════════════
# Entry point
# ════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    from infrastructure.web.expiry_scheduler import start_expiry_scheduler

    start_expiry_scheduler(get_link_store(), get_resource_store(), _settings.purge_interval_minutes)
    debug_mode = os.environ.get("FLASK_DEBUG", "false").lower() == "true"
    app.run(debug=debug_mode, port=3000, use_reloader=False)
