"""
Thin async HTTP client for the FarmVenture API.

Every failure leaves here as a `CollaboratorError` whose kind comes from a
structured `{"detail": {"code": ..., "message": ...}}` body when the API
sends one, and from the HTTP status otherwise. Message text is passed
through for logging only and never decides the kind.
"""
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from config.environment import backend_url, request_timeout
from core.errors import CollaboratorError, ErrorKind

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

STATUS_KINDS = {
    400: ErrorKind.REJECTED,
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.REJECTED,
    422: ErrorKind.VALIDATION,
}


def error_from_response(response: httpx.Response) -> CollaboratorError:
    try:
        body = response.json()
    except ValueError:
        body = None

    detail = body.get("detail") if isinstance(body, dict) else None
    kind = None
    message = ""
    if isinstance(detail, dict):
        message = detail.get("message") or ""
        try:
            kind = ErrorKind(detail.get("code"))
        except ValueError:
            kind = None
    elif isinstance(detail, str):
        message = detail

    if kind is None:
        if response.status_code >= 500:
            kind = ErrorKind.SERVER_ERROR
        else:
            kind = STATUS_KINDS.get(response.status_code, ErrorKind.REJECTED)
    return CollaboratorError(kind, message, status_code=response.status_code)


class ApiClient:
    """Shared `httpx.AsyncClient` plus the bearer token of the signed-in user."""

    def __init__(
        self,
        base_url: str = backend_url,
        token: Optional[str] = None,
        timeout: float = request_timeout,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self._client = httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)

    @property
    def signed_in(self) -> bool:
        return bool(self.token)

    def set_token(self, token: Optional[str]):
        self.token = token

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._client.request(method, path, json=json, params=params, headers=self._headers())
        except httpx.RequestError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise CollaboratorError(ErrorKind.TRANSPORT, str(e)) from e

        if response.is_error:
            error = error_from_response(response)
            logger.error("%s %s returned %s (%s)", method, path, response.status_code, error.kind.value)
            raise error
        try:
            return response.json()
        except ValueError as e:
            logger.error("%s %s returned a body that is not JSON", method, path)
            raise CollaboratorError(ErrorKind.SERVER_ERROR, "Unreadable response from the server", status_code=response.status_code) from e

    async def aclose(self):
        await self._client.aclose()


def parse_one(model: Type[M], data: Any) -> M:
    """Validate a success body; a wrong shape is the server's fault, not ours."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error("Response did not match %s: %s", model.__name__, e)
        raise CollaboratorError(ErrorKind.SERVER_ERROR, f"Unexpected {model.__name__} from the server") from e


def parse_many(model: Type[M], data: Any) -> List[M]:
    if not isinstance(data, list):
        logger.error("Expected a list of %s, got %s", model.__name__, type(data).__name__)
        raise CollaboratorError(ErrorKind.SERVER_ERROR, f"Unexpected {model.__name__} list from the server")
    return [parse_one(model, item) for item in data]
