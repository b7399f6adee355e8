from flask import jsonify
from catalog_admin.extensions import homepage_cache
from . import v1_bp

@v1_bp.route('/health', methods=['GET'])
def health_check():
    state = homepage_cache.state
    return jsonify({
        "status": "ok",
        "service": "catalog-admin",
        "homepage_cache": {
            "loaded": state.sections is not None,
            "is_loading": state.is_loading,
        },
    })
