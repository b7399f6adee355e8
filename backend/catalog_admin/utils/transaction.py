from contextlib import contextmanager
from catalog_admin.extensions import db

@contextmanager
def transactional():
    """Commit on success; roll back and re-raise on any failure."""
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
