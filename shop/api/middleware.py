"""
Error translation for API responses.
"""
import logging

from ariadne import format_error as default_format_error
from ariadne import unwrap_graphql_error
from django.http import JsonResponse
from graphql import GraphQLError

from shop.domain.exceptions import ShopError

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Error handler for API responses."""

    ERROR_CODES = {
        "VALIDATION_ERROR": 400,
        "INVALID_STATE": 400,
        "UNAUTHENTICATED": 401,
        "FORBIDDEN": 403,
        "NOT_FOUND": 404,
        "INSUFFICIENT_STOCK": 409,
        "NOT_CANCELLABLE": 409,
        "CONFLICT": 409,
        "DUPLICATE_REQUEST": 409,
        "INTERNAL_ERROR": 500,
    }

    @classmethod
    def status_for(cls, code: str) -> int:
        return cls.ERROR_CODES.get(code, 400)

    @classmethod
    def handle_error(cls, error: Exception) -> JsonResponse:
        """Handle error and return JSON response."""
        if isinstance(error, ShopError):
            return JsonResponse(
                {
                    "error": {
                        "code": error.code,
                        "message": error.message,
                        "details": error.details,
                    }
                },
                status=cls.status_for(error.code),
            )

        logger.error(
            "unexpected_error",
            extra={
                "error": f"{type(error).__name__}: {error}",
            },
            exc_info=error,
        )

        return cls.error_response("INTERNAL_ERROR", "An internal error occurred")

    @classmethod
    def error_response(cls, code: str, message: str) -> JsonResponse:
        return JsonResponse(
            {
                "error": {
                    "code": code,
                    "message": message,
                }
            },
            status=cls.status_for(code),
        )


def format_graphql_error(error: GraphQLError, debug: bool = False) -> dict:
    """Attach the domain error code to every GraphQL error.

    Expected domain errors keep their message and details; anything else is
    reported as an internal error without leaking internals.
    """
    original = unwrap_graphql_error(error)
    if isinstance(original, ShopError):
        formatted = error.formatted
        formatted["message"] = original.message
        formatted["extensions"] = {
            "code": original.code,
            "details": original.details,
        }
        return formatted

    if original is None or not error.path:
        # parse, validation and input coercion errors never reach a resolver
        formatted = default_format_error(error, debug)
        formatted.setdefault("extensions", {})["code"] = "GRAPHQL_VALIDATION_FAILED"
        return formatted

    if debug:
        formatted = default_format_error(error, debug)
    else:
        formatted = error.formatted
        formatted["message"] = "An internal error occurred"
        formatted.pop("extensions", None)
    formatted.setdefault("extensions", {})["code"] = "INTERNAL_ERROR"
    return formatted
