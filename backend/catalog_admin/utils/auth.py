from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from catalog_admin.domain.exceptions import CapabilityError

EDITOR_ROLES = {"admin", "editor"}


def require_editor() -> str:
    """
    Return the actor id of the current request if it may edit homepage
    content, otherwise raise CapabilityError.
    """
    try:
        verify_jwt_in_request()
    except (JWTExtendedException, PyJWTError) as exc:
        raise CapabilityError("Login required") from exc

    role = get_jwt().get("role")
    if role not in EDITOR_ROLES:
        raise CapabilityError("Editor permissions required")

    return str(get_jwt_identity())
