# adapters/web/api_v1_blueprint.py
# REST API Blueprint for programmatic access.

from flask import Blueprint, request

api_v1 = Blueprint('api_v1', __name__, url_prefix='/api/v1')


@api_v1.route('/links', methods=['POST'])
def api_create_link():
    """
    POST /api/v1/links
    Expects JSON {"link": str, "ttl": int (ms, optional)}.
    """
    # Simply forward to the main app's link logic
    from server import create_link, reject
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return reject("Request body must be a JSON object.")
    return create_link(payload.get("link"), payload.get("ttl"))


@api_v1.route('/links/<path:token>', methods=['GET'])
def api_find_link(token):
    """
    GET /api/v1/links/<token>
    """
    from server import find_link
    return find_link(token)


@api_v1.route('/files', methods=['POST'])
def api_upload_file():
    """
    POST /api/v1/files
    Expects multipart/form-data with 'file' and optional 'ttl' (ms).
    """
    from server import upload_file
    return upload_file()


@api_v1.route('/files/<path:token>', methods=['GET'])
def api_find_file(token):
    """
    GET /api/v1/files/<token>
    Record metadata only; bytes are served from /api/hash/file/<token>.
    """
    from server import find_file
    return find_file(token)
