from flask import Blueprint

# Create the versioned blueprint
v1_bp = Blueprint("v1", __name__)

# Import route modules so they register with v1_bp
from . import health
from .homepage_sections import homepage_bp

v1_bp.register_blueprint(homepage_bp, url_prefix="/admin/content")
