"""
Error Handling Middleware
Centralized error handling and logging
"""
import logging
import traceback
from flask import jsonify
from werkzeug.exceptions import HTTPException

from ..config import Settings
from ..utils.errors import AppError
from ..utils.validators import Helpers

# Configure logging
logging.basicConfig(
    level=getattr(logging, Settings.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class ErrorHandler:
    """Centralized error handling service"""

    @staticmethod
    def handle_app_error(error: AppError) -> tuple:
        """Handle errors raised by models and services"""
        if error.status >= 500:
            logger.error(f"{error.code}: {error.message}")
        elif error.status == 404:
            logger.info(f"Not found error: {error.message}")
        else:
            logger.warning(f"{error.code}: {error.message}")

        return jsonify(Helpers.build_error_response(
            message=error.message,
            code=error.code
        )), error.status

    @staticmethod
    def handle_http_error(error: HTTPException) -> tuple:
        """Handle werkzeug HTTP errors (404 routes, 405 methods, bad JSON)"""
        logger.info(f"HTTP error {error.code}: {error.description}")

        return jsonify(Helpers.build_error_response(
            message=error.description or error.name,
            code=error.name.upper().replace(' ', '_')
        )), error.code

    @staticmethod
    def handle_generic_error(error: Exception) -> tuple:
        """Handle generic errors"""
        logger.error(f"Unexpected error: {str(error)}")
        logger.error(f"Traceback: {traceback.format_exc()}")

        return jsonify(Helpers.build_error_response(
            message="An unexpected error occurred",
            code="INTERNAL_ERROR"
        )), 500


def register_error_handlers(app):
    """Register error handlers with Flask app"""

    @app.errorhandler(AppError)
    def handle_app_error(error):
        return ErrorHandler.handle_app_error(error)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return ErrorHandler.handle_http_error(error)

    @app.errorhandler(Exception)
    def handle_unhandled_exception(error):
        return ErrorHandler.handle_generic_error(error)
