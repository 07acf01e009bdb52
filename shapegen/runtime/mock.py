"""Mock collaborators for exercising generated clients without a network."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from shapegen.runtime.request import Credentials, DispatchResult, SignedRequest

__all__ = ['MockRequestDispatcher', 'MockCredentialsProvider', 'MockResponseReader']


class MockRequestDispatcher:
    """Answers every request with a canned status, body and headers.

    Example:
        >>> mock = MockRequestDispatcher.with_status(200).with_body('<A/>')
        >>> mock.dispatch(request).status
        200
    """

    def __init__(self, status: int = 200):
        self.status = status
        self.body = ''
        self.headers: dict[str, str] = {}
        self.requests: list[SignedRequest] = []
        self._request_checker: Callable[[SignedRequest], None] | None = None

    @classmethod
    def with_status(cls, status: int) -> 'MockRequestDispatcher':
        return cls(status)

    def with_body(self, body: str) -> 'MockRequestDispatcher':
        self.body = body
        return self

    def with_header(self, name: str, value: str) -> 'MockRequestDispatcher':
        self.headers[name.lower()] = value
        return self

    def with_request_checker(
        self, checker: Callable[[SignedRequest], None]
    ) -> 'MockRequestDispatcher':
        self._request_checker = checker
        return self

    def dispatch(self, request: SignedRequest) -> DispatchResult:
        self.requests.append(request)
        if self._request_checker is not None:
            self._request_checker(request)
        return DispatchResult(self.status, self.body, dict(self.headers))


class MockCredentialsProvider:
    def credentials(self) -> Credentials:
        return Credentials('mock_key', 'mock_secret')


class MockResponseReader:
    @staticmethod
    def read_response(directory: str | Path, file_name: str) -> str:
        return (Path(directory) / file_name).read_text(encoding='utf-8')
