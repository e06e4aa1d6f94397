"""
Caller resolution and owner-or-admin access rules.

Token validation lives in front of this service; by the time a request
reaches the view, the gateway has put the authenticated customer id into
the ``X-User-ID`` header.
"""
from __future__ import annotations

from uuid import UUID

from shop.domain.exceptions import PermissionDenied, Unauthenticated
from shop.infra.models import CustomerORM
from shop.infra.repositories import CustomerRepository

USER_HEADER = "X-User-ID"


def resolve_caller(request, customer_repo: CustomerRepository | None = None) -> CustomerORM | None:
    """Customer named by the ``X-User-ID`` header, or None."""
    user_id = request.headers.get(USER_HEADER)
    if not user_id:
        return None
    try:
        user_uuid = UUID(user_id)
    except (TypeError, ValueError):
        return None
    return (customer_repo or CustomerRepository()).get_by_id(user_uuid)


def get_caller(info) -> CustomerORM:
    caller = info.context.get("caller")
    if caller is None:
        raise Unauthenticated("Authentication required")
    return caller


def require_admin(info) -> CustomerORM:
    caller = get_caller(info)
    if not caller.is_admin:
        raise PermissionDenied("Administrator role required")
    return caller


def require_owner_or_admin(info, customer_id: UUID) -> CustomerORM:
    caller = get_caller(info)
    if caller.is_admin or caller.id == customer_id:
        return caller
    raise PermissionDenied("Access denied. Insufficient privileges")
