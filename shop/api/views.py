"""
GraphQL view with idempotency and logging support.
"""
import hashlib
import json
import logging
import re
from uuid import uuid4

from ariadne import graphql_sync
from django.conf import settings
from django.db import IntegrityError, transaction
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from shop.api.access import resolve_caller
from shop.api.middleware import ErrorHandler, format_graphql_error
from shop.api.schema import schema
from shop.infra.models import IdempotencyKey
from shop.infra.pii_masker import mask_pii_in_dict

logger = logging.getLogger(__name__)

_MUTATION_OPERATIONS = (
    ("createOrder", "CREATE_ORDER"),
    ("updateOrderStatus", "UPDATE_ORDER_STATUS"),
    ("cancelOrder", "CANCEL_ORDER"),
)
_MUTATION_RE = re.compile(r"^\s*mutation\b")


class StorefrontGraphQLView:
    """GraphQL view with idempotency and structured logging."""

    def dispatch(self, request, *args, **kwargs):
        """Handle GraphQL request with idempotency."""
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        idempotency_key = request.headers.get("Idempotency-Key")
        caller = resolve_caller(request)
        user_id = str(caller.id) if caller else None

        log_data = {
            "request_id": request_id,
            "user_id": user_id,
            "idempotency_key": idempotency_key[:8] + "..." if idempotency_key else None,
            "operation": "graphql",
        }
        logger.info("graphql_request", extra=mask_pii_in_dict(log_data))

        if request.method == "GET":
            return JsonResponse({"message": "GraphQL endpoint. Use POST for queries."})

        try:
            data = json.loads(request.body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return ErrorHandler.error_response("VALIDATION_ERROR", "Invalid JSON")
        if not isinstance(data, dict):
            return ErrorHandler.error_response("VALIDATION_ERROR", "Request body must be a JSON object")

        operation = self._extract_operation(data)
        try:
            if idempotency_key and caller and operation:
                response = self._process_idempotent_request(
                    request, data, caller, operation, idempotency_key, request_id,
                )
            else:
                response = self._process_graphql_request(request, data, caller)
        except Exception as e:
            response = ErrorHandler.handle_error(e)

        logger.info(
            "graphql_response",
            extra={
                "request_id": request_id,
                "user_id": mask_pii_in_dict({"user_id": user_id})["user_id"],
                "status": response.status_code,
            }
        )

        return response

    def _process_idempotent_request(self, request, data, caller, operation, idempotency_key, request_id):
        request_hash = self._create_request_hash(data.get("query", ""), data.get("variables") or {})

        existing = IdempotencyKey.objects.filter(
            key=idempotency_key,
            user_id=caller.id,
            operation=operation,
        ).first()

        if existing:
            if existing.request_hash == request_hash:
                logger.info(
                    "idempotent_request_cached",
                    extra={
                        "request_id": request_id,
                        "operation": operation,
                    }
                )
                return JsonResponse(existing.response_payload, safe=False)

            logger.warning(
                "idempotency_key_conflict",
                extra={
                    "request_id": request_id,
                    "operation": operation,
                }
            )
            return ErrorHandler.error_response(
                "DUPLICATE_REQUEST",
                "Idempotency key already used with different request",
            )

        response = self._process_graphql_request(request, data, caller)

        # Only successful executions are replayable; failures may be retried.
        payload = json.loads(response.content)
        if response.status_code == 200 and not payload.get("errors"):
            try:
                with transaction.atomic():
                    IdempotencyKey.objects.create(
                        key=idempotency_key,
                        user_id=caller.id,
                        operation=operation,
                        request_hash=request_hash,
                        response_payload=payload,
                    )
            except IntegrityError:
                logger.warning(
                    "idempotency_key_race",
                    extra={
                        "request_id": request_id,
                        "operation": operation,
                    }
                )

        return response

    def _create_request_hash(self, query: str, variables: dict) -> str:
        """Create hash of request for deduplication."""
        content = json.dumps({"query": query, "variables": variables}, sort_keys=True, default=str)
        return hashlib.sha256(content.encode()).hexdigest()

    def _extract_operation(self, data: dict) -> str | None:
        """Extract the idempotent operation type of a mutation request."""
        query = data.get("query") or ""
        if not isinstance(query, str) or not _MUTATION_RE.match(query):
            return None
        for field_name, operation in _MUTATION_OPERATIONS:
            if re.search(rf"\b{field_name}\b", query):
                return operation
        return None

    def _process_graphql_request(self, request, data, caller):
        """Process GraphQL request."""
        success, result = graphql_sync(
            schema,
            data,
            context_value={"request": request, "caller": caller},
            debug=settings.DEBUG,
            error_formatter=format_graphql_error,
        )

        status_code = 200 if success else 400
        return JsonResponse(result, status=status_code)


@csrf_exempt
@require_http_methods(["GET", "POST"])
def graphql_view(request):
    """GraphQL endpoint."""
    view = StorefrontGraphQLView()
    return view.dispatch(request)
