from typing import Tuple

from flask import Blueprint, current_app, jsonify, request

from codefix.errors import RelayError, UnexpectedServerError
from codefix.services.analysis_service import analyze_code

api_blueprint = Blueprint('api', __name__)


@api_blueprint.route('/analyze', methods=['POST'])
def analyze() -> Tuple[str, int]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    try:
        result = analyze_code(
            data.get('language'),
            data.get('code'),
            api_key=current_app.config.get('GEMINI_API_KEY'),
            model_name=current_app.config.get('GEMINI_MODEL'),
            timeout=current_app.config.get('GEMINI_TIMEOUT'),
        )
        return jsonify(result.to_response()), 200
    except RelayError as e:
        current_app.logger.warning(f"Analysis rejected with {e.status_code}: {e.message}")
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.exception("An unexpected error occurred during analysis.")
        error = UnexpectedServerError(details=str(e))
        return jsonify(error.to_dict()), error.status_code


def register_error_handlers(app):
    """Framework-level errors are answered with JSON bodies too."""

    @app.errorhandler(413)
    def request_too_large(e):
        return jsonify({"error": "Request body too large"}), 413

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405
