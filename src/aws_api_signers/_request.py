# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Helpers for turning the caller's request options into signing inputs."""

import json
from collections import Counter
from collections.abc import Mapping
from http import HTTPMethod
from typing import Any
from urllib.parse import quote

from .interfaces.signing import RequestOptions


def normalize_method(http_method: HTTPMethod | str) -> str:
    """Return the upper-cased method token.

    Tokens outside of :py:class:`http.HTTPMethod` are passed through so that
    extension methods can still be signed.
    """
    if isinstance(http_method, HTTPMethod):
        return http_method.value
    return str(http_method).upper()


def safe_escape(string: str) -> str:
    """Percent-encode everything but the unreserved characters ``A-Za-z0-9_.-~``.

    Multi-byte characters are encoded one UTF-8 byte at a time, and spaces become
    ``%20`` rather than ``+``.
    """
    return quote(string=string, safe="")


def form_encode(form: Mapping[str, str]) -> str:
    """Encode form fields as ``key=value`` pairs joined with ``&``.

    Pairs keep the mapping's iteration order; keys and values are escaped with
    :py:func:`safe_escape`.
    """
    return "&".join(
        f"{safe_escape(str(key))}={safe_escape(str(value))}"
        for key, value in form.items()
    )


def serialize_json(payload: Any) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def resolve_body(options: RequestOptions) -> bytes:
    """Resolve the bytes that will be hashed as the request payload.

    ``json`` takes priority over ``form``, which takes priority over ``body``. A
    request with none of them has an empty body.
    """
    if options.get("json") is not None:
        return serialize_json(options["json"])
    if (form := options.get("form")) is not None:
        return form_encode(form).encode("utf-8")
    body = options.get("body")
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


def normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Lower-case header names, sort them byte-wise and strip trailing whitespace
    from values.

    :raises ValueError: If two names only differ by case.
    """
    if not headers:
        return {}
    name_counter = Counter(name.lower() for name in headers)
    non_unique_names = [name for name, num in name_counter.items() if num > 1]
    if non_unique_names:
        raise ValueError(
            "Header names must be unique regardless of case. The following "
            f"header names appear more than once: {', '.join(non_unique_names)}."
        )
    return dict(
        sorted((name.lower(), str(value).rstrip()) for name, value in headers.items())
    )
