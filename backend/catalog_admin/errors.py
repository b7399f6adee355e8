from flask import current_app, jsonify
from catalog_admin.domain.exceptions import CapabilityError, GatewayError, HomepageError


def register_error_handlers(app):
    @app.errorhandler(HomepageError)
    def handle_homepage_error(error):
        if isinstance(error, GatewayError):
            current_app.logger.error(f"Gateway failure: {error.message}")
        elif not isinstance(error, CapabilityError):
            current_app.logger.info(f"{error.error_code}: {error.message}")

        response = jsonify(error.to_dict())
        response.status_code = error.status_code
        return response
