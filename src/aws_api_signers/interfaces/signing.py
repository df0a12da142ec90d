# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from http import HTTPMethod
from typing import Any, Protocol, Required, TypedDict, runtime_checkable


class RequestOptions(TypedDict, total=False):
    """The parts of an HTTP request, other than method and path, that are signed.

    At most one of ``body``, ``json`` and ``form`` is expected. When more than one
    is given, ``json`` wins over ``form`` which wins over ``body``.
    """

    params: Mapping[str, str]
    """Query parameters, keyed by their unescaped names."""

    headers: Mapping[str, str]
    """Header fields. Names are case insensitive and must be unique."""

    body: bytes | str
    """Raw request body."""

    json: Any
    """A structured payload that is serialized to compact JSON before hashing."""

    form: Mapping[str, str]
    """Form fields that are url-encoded before hashing."""


class SigV4SigningProperties(TypedDict, total=False):
    region: Required[str]
    service: Required[str]
    hmac_kind: str


@runtime_checkable
class RequestSigner(Protocol):
    """A request signature generator for a single signature version."""

    algorithm: str

    def generate(
        self,
        http_method: HTTPMethod | str,
        path: str,
        options: RequestOptions | None = None,
        *,
        date: datetime | None = None,
    ) -> str:
        """Generate the value of the ``Authorization`` header for a request.

        :param http_method: The HTTP request method.
        :param path: The request path, already normalized by the caller.
        :param options: Query parameters, headers and body of the request.
        :param date: The signing instant. Defaults to the current time.
        """
        ...
