"""
Errors raised by the remotekv client.

Validation errors (InvalidArgument, RequestTooLarge) are raised locally, before
any request is issued. RemoteFailure is raised when the API answers with an
error status on an operation that checks it.
"""

from typing import Any, List, Optional


class KVError(Exception):
    """
    Base class of all remotekv errors. `method` is the HTTP method of the
    operation that failed, and `status` the HTTP-style status describing the
    failure, when there is one.
    """

    def __init__(
        self,
        detail: str,
        method: Optional[str] = None,
        status: Optional[int] = None,
    ):
        if method is not None and status is not None:
            message = f"KV {method} failed: {status} {detail}"
        else:
            message = detail
        super().__init__(message)
        self.detail = detail
        self.method = method
        self.status = status


class InvalidArgument(KVError, ValueError):
    """
    A key, option or value that the edge runtime would refuse.
    """

    pass


class RequestTooLarge(KVError, ValueError):
    """
    A key, value or metadata that exceeds its size limit.
    """

    pass


class RemoteFailure(KVError, RuntimeError):
    """
    The API returned a non-2xx status. `message` is the backend supplied error
    message, and `codes` the backend error codes, if the body carried any.
    """

    def __init__(
        self,
        method: str,
        status: int,
        message: str,
        codes: Optional[List[int]] = None,
        response: Any = None,
    ):
        super().__init__(message, method=method, status=status)
        self.message = message
        self.codes = codes or []
        self.response = response


class ClientError(RemoteFailure):
    pass


class ServerError(RemoteFailure):
    pass
