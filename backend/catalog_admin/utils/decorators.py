from functools import wraps
from flask import g
from catalog_admin.utils.auth import require_editor


def editor_required(fn):
    """Check the editor capability once and expose the actor as ``g.actor_id``."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        g.actor_id = require_editor()
        return fn(*args, **kwargs)
    return wrapper
