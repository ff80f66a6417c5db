from pydantic import BaseModel
from httpx import Response
from typing import TYPE_CHECKING, List, NoReturn, Tuple, Type, TypeVar

from .utils import ClientError, ServerError

if TYPE_CHECKING:
    # only used for type hinting, but avoids circular imports
    from .client import APIClient


def _error_details(response: Response) -> Tuple[str, List[int]]:
    """
    Extracts the message and error codes from a Cloudflare v4 error envelope of the
    form {"success": false, "errors": [{"code": ..., "message": ...}]}. Falls back to
    the raw body text when the body is not such an envelope.
    """
    try:
        errors = response.json().get("errors") or []
        messages = [str(e.get("message", "")) for e in errors]
        codes = [e["code"] for e in errors if "code" in e]
    except Exception:
        return response.text, []
    message = "; ".join(m for m in messages if m)
    return (message or response.text), codes


class APIResource(object):
    """
    APIResource is the base class of all api implementations. It is created by the
    APIClient and provides utility functions to check and decode responses.
    """

    _client: "APIClient"

    def __init__(self, _client: "APIClient"):
        """
        Initializes the APIResource with the APIClient. You should not need to
        call this explicitly: the APIClient registers its resources in __init__.
        """
        self._client = _client
        self._get = _client._get
        self._put = _client._put
        self._delete = _client._delete
        self._stream = _client._stream

    def _raise_if_not_ok(self, method: str, response: Response) -> Response:
        """
        Raises a RemoteFailure if the response status is not 2xx.
        """
        if response.is_success:
            return response
        message, codes = _error_details(response)
        ErrorType = ServerError if response.status_code >= 500 else ClientError
        raise ErrorType(method, response.status_code, message, codes, response)

    def _print_programming_error(self, response: Response, e: Exception) -> NoReturn:
        """
        Raised when a 2xx response cannot be decoded. This should not happen in
        production.
        """
        raise RuntimeError(
            "You encountered a programming error. Please report this, and include"
            " the following debug info:\n*** begin of debug info ***\nresponse"
            f" returned {response.status_code}, but the content cannot be decoded"
            f" as expected.\nresponse.text: {response.text}\n\nexception"
            f" details:\n{e}\n*** end of debug info ***"
        )

    # A type variable to represent a subclass of BaseModel
    T = TypeVar("T", bound=BaseModel)

    def ensure_type(self, method: str, response: Response, EnsuredType: Type[T]) -> T:
        """
        Utility function to ensure that the response is of the given type.
        """
        self._raise_if_not_ok(method, response)
        try:
            return EnsuredType.model_validate(response.json())
        except Exception as e:
            self._print_programming_error(response, e)

    def ensure_ok(self, method: str, response: Response) -> bool:
        """
        Utility function to ensure that the response is ok.
        """
        self._raise_if_not_ok(method, response)
        return True
