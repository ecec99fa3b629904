"""
Custom exceptions for the Mobility Dashboard API.
"""

from typing import Any, Dict, Optional


class DashboardException(Exception):
    """Base exception for application."""

    def __init__(
        self,
        detail: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ):
        self.detail = detail
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.payload = payload or {}
        super().__init__(detail)


class OperatorNotFoundError(DashboardException):
    """Requested operator id is not in the registry."""

    def __init__(self, operator_id: str):
        super().__init__(
            detail=f"Operator not found: {operator_id}",
            status_code=404,
            error_code="OPERATOR_NOT_FOUND",
        )


class OperatorUnavailableError(DashboardException):
    """No usable GBFS data could be obtained for an operator."""

    def __init__(self, operator_name: str, feed_url: str):
        super().__init__(
            detail=f"Failed to fetch data from operator {operator_name}",
            status_code=503,
            error_code="OPERATOR_UNAVAILABLE",
            payload={"operator": operator_name, "url": feed_url},
        )


class InvalidRequestError(DashboardException):
    """Malformed or out-of-range request input."""

    def __init__(self, detail: str):
        super().__init__(
            detail=detail,
            status_code=400,
            error_code="INVALID_REQUEST",
        )


class UpstreamFetchError(DashboardException):
    """Upstream dataset could not be fetched or decoded."""

    def __init__(self, source: str, detail: str):
        super().__init__(
            detail=f"Failed to fetch {source}: {detail}",
            status_code=502,
            error_code="UPSTREAM_FETCH_ERROR",
        )
