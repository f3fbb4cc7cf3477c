from functools import wraps

from ddm_jewellers.core.imports import jsonify, get_jwt, get_jwt_identity, verify_jwt_in_request


def current_user_id():
    return int(get_jwt_identity())


def current_role():
    return get_jwt().get("role")


def is_admin():
    return current_role() == "admin"


def role_required(*roles):
    """Require a valid JWT whose ``role`` claim is one of ``roles``."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if get_jwt().get("role") not in roles:
                return jsonify({"error": "Forbidden"}), 403
            return fn(*args, **kwargs)
        return wrapper
    return decorator


admin_required = role_required("admin")
