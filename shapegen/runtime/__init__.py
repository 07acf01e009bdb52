"""Runtime support imported by generated client modules.

Generated code depends on this package for request construction
(:mod:`~shapegen.runtime.params`, :mod:`~shapegen.runtime.request`), for
walking XML responses (:mod:`~shapegen.runtime.xmlutil`) and for its error
types (:mod:`~shapegen.runtime.errors`).
"""

from shapegen.runtime.errors import MissingParameterError, ServiceError, XmlParseError
from shapegen.runtime.params import Params
from shapegen.runtime.request import (
    Credentials,
    DispatchResult,
    HttpxDispatcher,
    SignedRequest,
    StaticCredentialsProvider,
)
from shapegen.runtime.xmlutil import XmlEvent, XmlResponse

__all__ = [
    'Credentials',
    'DispatchResult',
    'HttpxDispatcher',
    'MissingParameterError',
    'Params',
    'ServiceError',
    'SignedRequest',
    'StaticCredentialsProvider',
    'XmlEvent',
    'XmlParseError',
    'XmlResponse',
]
