"""
Style profile API.

    GET    /api/profiles/<profile_id>   stored document plus its normalized styles
    PUT    /api/profiles/<profile_id>   replace the stored document
    DELETE /api/profiles/<profile_id>

All routes need ``Authorization: Bearer <API_KEY>``.
"""
from flask import Blueprint, request, jsonify, current_app

import config
from services.errors import ConfigurationError
from services.profiles import get_profile_store, load_profile
from services.styles import normalize_styles
from utils.api_auth import presented_api_key, api_key_valid

profiles_bp = Blueprint("profiles", __name__, url_prefix="/api/profiles")


@profiles_bp.before_request
def require_api_key():
    if not api_key_valid(presented_api_key(), config.API_KEY):
        return jsonify({"success": False, "message": "Invalid or missing API key"}), 403


@profiles_bp.route("/<profile_id>", methods=["GET"])
def get_profile(profile_id):
    try:
        document = load_profile(get_profile_store(), profile_id)
    except ConfigurationError as e:
        return jsonify({"success": False, "message": str(e)}), e.status_code

    return jsonify({
        "success": True,
        "profileId": profile_id,
        "profile": document,
        "normalized": normalize_styles(document.get("styles"), document.get("document")),
    })


@profiles_bp.route("/<profile_id>", methods=["PUT"])
def put_profile(profile_id):
    document = request.get_json(silent=True)
    if not isinstance(document, dict):
        return jsonify({"success": False, "message": "Profile must be a JSON object"}), 400

    try:
        get_profile_store().set(profile_id, document)
    except Exception as e:
        current_app.logger.error(f"[Profiles] Failed to save profile {profile_id}: {e}")
        return jsonify({"success": False, "message": "Failed to save profile"}), 500

    current_app.logger.info(f"[Profiles] Saved profile {profile_id}")
    return jsonify({"success": True, "profileId": profile_id})


@profiles_bp.route("/<profile_id>", methods=["DELETE"])
def delete_profile(profile_id):
    if not get_profile_store().delete(profile_id):
        return jsonify({"success": False, "message": f"Style profile not found: {profile_id}"}), 404

    current_app.logger.info(f"[Profiles] Deleted profile {profile_id}")
    return jsonify({"success": True, "profileId": profile_id})
