# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import hashlib
import hmac
from typing import TypeAlias

from .exceptions import UnsupportedAlgorithmError

BytesLike: TypeAlias = bytes | bytearray | str


def _to_bytes(value: BytesLike) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


class Hmac:
    """Keyed-hash helper wrapping a ``hashlib`` algorithm in HMAC mode.

    Every call builds its own hash object, so nothing carries over from one
    operation to the next and a single instance can be shared between threads.
    """

    def __init__(self, kind: str = "sha256", key: BytesLike = b"") -> None:
        """Create a new keyed-hash helper.

        :param kind: Name of the digest algorithm (``sha1``, ``sha256``,
            ``sha512``, ...). Matching is case-insensitive.
        :param key: Default secret key used when ``sign`` is called without one.
        :raises UnsupportedAlgorithmError: If ``kind`` is not a known algorithm.
        """
        name = kind.lower()
        try:
            # Extendable-output functions have no fixed digest size for HMAC.
            if hashlib.new(name).digest_size == 0:
                raise ValueError(f"{name} has a variable digest size")
        except (ValueError, TypeError) as e:
            raise UnsupportedAlgorithmError(
                f"Unrecognized hash algorithm {kind!r}. Expected one of: "
                f"{', '.join(sorted(hashlib.algorithms_guaranteed))}."
            ) from e
        self._name = name
        self._key = _to_bytes(key)

    @property
    def name(self) -> str:
        """The name of the configured digest algorithm."""
        return self._name

    @property
    def key(self) -> bytes:
        return self._key

    def __str__(self) -> str:
        return f"Hmac{self._name.upper()}"

    def __repr__(self) -> str:
        return f"Hmac(kind={self._name!r})"

    def digest(self, content: BytesLike) -> str:
        """Compute the plain hash of ``content``.

        :returns: The lowercase hexadecimal digest.
        """
        return hashlib.new(self._name, _to_bytes(content)).hexdigest()

    def sign(self, data: BytesLike, key: BytesLike | None = None) -> bytes:
        """Compute the HMAC of ``data``.

        :param data: The message to sign.
        :param key: Key to sign with. Defaults to the key given at construction.
        :returns: The raw HMAC bytes.
        """
        return self._new(data, key).digest()

    def hex_sign(self, data: BytesLike, key: BytesLike | None = None) -> str:
        """Same as ``sign`` but returns the lowercase hexadecimal form."""
        return self._new(data, key).hexdigest()

    def _new(self, data: BytesLike, key: BytesLike | None) -> "hmac.HMAC":
        signing_key = self._key if key is None else _to_bytes(key)
        return hmac.new(key=signing_key, msg=_to_bytes(data), digestmod=self._name)
