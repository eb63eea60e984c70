# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/app/routes/auth.py
"""
Authentication API routes

SECURITY FEATURES:
- Accounts are created by administrators only (no self-registration)
- Session management with token-based auth
- Password change revokes every other session of the member
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services import permission_service
from ..decorators import require_auth
from ..validation import ValidationError
from .common import error_response


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _member_payload(member) -> dict:
    return {
        "member": member.to_dict(),
        "permissions": sorted(permission_service.get_member_permissions(member)),
    }


@auth_bp.post("/login")
def login_route():
    """
    Authenticate member and create session token.

    Token must be included in Authorization header for protected routes.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        member = auth_service.authenticate(email, password)

        if not member:
            current_app.logger.info("Failed login for %s from %s", email, request.remote_addr)
            return jsonify({"error": "Invalid credentials"}), 401

        session, token = session_service.create_session(
            member_id=member.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr
        )

        body = _member_payload(member)
        body.update({
            "token": token,
            "session": session.to_dict(),
            "message": "Login successful",
        })
        return jsonify(body), 200

    except Exception:
        current_app.logger.exception("Failed to login member")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke session token (logout).

    Expects Authorization header: Bearer <token>
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return jsonify({"error": "Authorization header required"}), 401

    token = auth_header.split(" ", 1)[1]

    if not session_service.revoke_session(token, reason="User logout"):
        return jsonify({"error": "Invalid or expired token"}), 401

    return jsonify({"message": "Logout successful"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current member with the permission codes the UI should expose."""
    return jsonify(_member_payload(g.current_user))


@auth_bp.post("/change-password")
@require_auth
def change_password_route():
    data = request.get_json(silent=True) or {}

    try:
        auth_service.change_password(
            g.current_user,
            data.get("current_password"),
            data.get("new_password"),
        )
    except ValidationError as e:
        return error_response(e)

    revoked = session_service.revoke_all_member_sessions(
        g.current_user.id,
        reason="Password changed",
        except_session_id=g.session_context.session.id,
    )
    return jsonify({"message": "Password changed", "revoked_sessions": revoked})
