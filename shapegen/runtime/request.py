"""Request construction and dispatch for generated clients.

Generated methods build a :class:`SignedRequest`, sign it with credentials
from a credentials provider and hand it to a dispatcher. Computing the
request signature is the job of the transport; :meth:`SignedRequest.sign`
only attaches the credentials to the request.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Protocol

import httpx

from shapegen.runtime.params import Params

logger = logging.getLogger(__name__)

__all__ = [
    'Credentials',
    'CredentialsProvider',
    'StaticCredentialsProvider',
    'SignedRequest',
    'DispatchResult',
    'RequestDispatcher',
    'HttpxDispatcher',
]


@dataclasses.dataclass(frozen=True)
class Credentials:
    access_key: str
    secret_key: str
    token: str | None = None


class CredentialsProvider(Protocol):
    def credentials(self) -> Credentials: ...


@dataclasses.dataclass
class StaticCredentialsProvider:
    access_key: str
    secret_key: str
    token: str | None = None

    def credentials(self) -> Credentials:
        return Credentials(self.access_key, self.secret_key, self.token)


@dataclasses.dataclass
class SignedRequest:
    """An outgoing request: method, target service, region and path.

    Attributes:
        method: HTTP method, e.g. ``GET``.
        service: Endpoint prefix of the service, e.g. ``s3``.
        region: Region name, e.g. ``us-east-1``.
        path: Request path after URI template substitution.
    """

    method: str
    service: str
    region: str
    path: str
    params: Params = dataclasses.field(default_factory=Params)
    headers: dict[str, str] = dataclasses.field(default_factory=dict)
    payload: bytes | None = None
    credentials: Credentials | None = None

    @property
    def hostname(self) -> str:
        return f'{self.service}.{self.region}.amazonaws.com'

    def add_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def set_params(self, params: Params) -> None:
        self.params = params

    def set_payload(self, payload: bytes | None) -> None:
        self.payload = payload

    def sign(self, credentials: Credentials) -> None:
        self.credentials = credentials


@dataclasses.dataclass(frozen=True)
class DispatchResult:
    status: int
    body: str
    headers: dict[str, str] = dataclasses.field(default_factory=dict)


class RequestDispatcher(Protocol):
    def dispatch(self, request: SignedRequest) -> DispatchResult: ...


class HttpxDispatcher:
    """Sends a :class:`SignedRequest` over HTTPS with httpx.

    Query-protocol requests (``POST`` without a payload) carry their params
    as a form body; every other request sends the params as a query string
    and the payload, if any, as the body.

    Args:
        client: Optional preconfigured httpx client.
        endpoint: Base URL overriding ``https://{request.hostname}``.
        timeout: Timeout in seconds for the default client.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        endpoint: str | None = None,
        timeout: float = 30.0,
    ):
        self._client = client or httpx.Client(timeout=timeout)
        self._endpoint = endpoint

    def _url(self, request: SignedRequest) -> str:
        base = self._endpoint or f'https://{request.hostname}'
        return f'{base.rstrip("/")}{request.path}'

    def dispatch(self, request: SignedRequest) -> DispatchResult:
        url = self._url(request)
        params = request.params.to_dict()
        logger.debug(f'{request.method} {url} ({len(params)} params)')

        if request.method.upper() == 'POST' and request.payload is None:
            response = self._client.request(
                request.method, url, data=params, headers=request.headers
            )
        else:
            response = self._client.request(
                request.method,
                url,
                params=params,
                content=request.payload,
                headers=request.headers,
            )

        return DispatchResult(
            status=response.status_code,
            body=response.text,
            headers={name.lower(): value for name, value in response.headers.items()},
        )
