"""HTTP middleware."""

from contracts_api.middleware.correlation import RequestIdMiddleware, RequestIdLogFilter, get_request_id

__all__ = ["RequestIdMiddleware", "RequestIdLogFilter", "get_request_id"]
