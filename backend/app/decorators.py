# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service, permission_service
from .services.permission_service import PermissionDeniedError


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def _deny(message: str, **extra):
    body = {"error": "Permission denied", "message": message}
    body.update(extra)
    return jsonify(body), 403


def require_auth(f):
    """
    Require authentication.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated Member
    - g.session_context: The full SessionContext object

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - Member account deactivated or deleted
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1]

        context = session_service.validate_session(token)

        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = context.member
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """Require a specific permission. Must be applied after @require_auth."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            try:
                permission_service.require_permission(
                    g.current_user,
                    permission_code,
                    resource=request.path,
                )
            except PermissionDeniedError as e:
                return _deny(str(e), required_permission=permission_code)

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_any_permission(*permission_codes):
    """Require any of the specified permissions."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            member = g.current_user
            if not any(permission_service.member_has_permission(member, code) for code in permission_codes):
                return _deny(
                    f"Requires any of: {', '.join(permission_codes)}",
                    required_permissions=list(permission_codes),
                )

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_self_or_permission(permission_code: str, arg_name: str = "person_id"):
    """
    Allow access when the route's `arg_name` is the caller's own id,
    otherwise require `permission_code`.

    Used for "my attendance" style endpoints.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            member = g.current_user
            if kwargs.get(arg_name) == member.id:
                return f(*args, **kwargs)

            if not permission_service.member_has_permission(member, permission_code):
                return _deny(
                    f"Permission denied: {permission_code}",
                    required_permission=permission_code,
                )

            return f(*args, **kwargs)

        return decorated_function
    return decorator
