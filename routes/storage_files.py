"""
Local artifact serving.

Rendered HTML, PDF and home pages written by LocalStorage are served from
/storage/<key> so the links in a local render work in a browser. Disabled
unless STORAGE_BACKEND is 'local' and the stage is not production.
"""
import mimetypes

from flask import Blueprint, abort, send_file

import config
from utils.storage import get_storage

storage_files_bp = Blueprint('storage_files', __name__)


@storage_files_bp.route('/storage/<path:key>')
def serve_storage_file(key):
    if config.STORAGE_BACKEND != 'local' or config.IS_PRODUCTION:
        abort(404)

    storage = get_storage()
    try:
        if not storage.exists(key):
            abort(404)
        content = storage.get_file(key)
    except ValueError:
        # Traversal attempt
        abort(404)

    content_type, _ = mimetypes.guess_type(key)
    if key.endswith(".html"):
        content_type = "text/html; charset=utf-8"
    return send_file(content, mimetype=content_type or 'application/octet-stream', as_attachment=False)
