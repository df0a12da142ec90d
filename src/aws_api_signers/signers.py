# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import datetime
import logging
import warnings
from collections.abc import Mapping
from dataclasses import dataclass, field
from http import HTTPMethod
from typing import Final

from ._identity import AWSCredentialIdentity
from ._request import (
    form_encode,
    normalize_headers,
    normalize_method,
    resolve_body,
    safe_escape,
)
from .exceptions import (
    AWSSDKWarning,
    MissingCredentialsError,
    MissingExpectedParameterException,
    UnsupportedAlgorithmError,
)
from .hashing import Hmac
from .interfaces.identity import AWSCredentialsIdentity as _AWSCredentialsIdentity
from .interfaces.signing import RequestOptions, SigV4SigningProperties

logger: Final = logging.getLogger(__name__)

SIGV4_ALGORITHM: Final = "AWS4-HMAC-SHA256"
SIGV4_TIMESTAMP_FORMAT: Final = "%Y%m%dT%H%M%SZ"
SIGV4_DATE_FORMAT: Final = "%Y%m%d"
SIGV4_TERMINATOR: Final = "aws4_request"
EMPTY_SHA256_HASH: Final = (
    "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
)


def _signing_instant(date: datetime.datetime | None = None) -> datetime.datetime:
    if date is None:
        return datetime.datetime.now(datetime.UTC)
    if date.tzinfo is None:
        return date.replace(tzinfo=datetime.UTC)
    return date.astimezone(datetime.UTC)


def time_iso8601(date: datetime.datetime | None = None) -> str:
    """Format ``date``, or the current time, as a SigV4 timestamp.

    :returns: The UTC time in ``YYYYMMDDTHHMMSSZ`` form.
    """
    return _signing_instant(date).strftime(SIGV4_TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class SignedRequest:
    """Headers and body to transmit for a signed request."""

    headers: dict[str, str] = field(default_factory=dict)
    """The caller's headers plus ``X-Amz-Date``, ``X-Amz-Security-Token`` when a
    session token is present, and ``Authorization``."""

    body: bytes = b""
    """The exact payload bytes that were hashed into the signature."""

    @property
    def authorization(self) -> str:
        return self.headers["Authorization"]


class Signature:
    """Base type for request signature versions.

    Subclasses implement :py:meth:`generate`; the base cannot be used directly.
    """

    algorithm: str

    def __init__(self, *args: object, **kwargs: object) -> None:
        if type(self) is Signature:
            raise NotImplementedError("This class should not be used directly!")

    def generate(
        self,
        http_method: HTTPMethod | str,
        path: str,
        options: RequestOptions | None = None,
        *,
        date: datetime.datetime | None = None,
    ) -> str:
        """Generate the signature.

        :param http_method: HTTP request method.
        :param path: Request path.
        :param options: Request params, headers and body.
        :param date: The signing instant. Defaults to the current time.
        """
        raise NotImplementedError

    def safe_escape(self, string: str) -> str:
        """URL escape compatible with AWS requirements."""
        return safe_escape(string)

    def form_encode(self, form: Mapping[str, str]) -> str:
        """Form body encoding using the same escaping as query parameters."""
        return form_encode(form)


class SigV4Signature(Signature):
    """Request signature generator for the AWS Signature Version 4 algorithm.

    One instance is bound to a single set of credentials, region and service and
    may be reused, including from multiple threads, for any number of requests.
    """

    algorithm = SIGV4_ALGORITHM

    def __init__(
        self,
        identity: AWSCredentialIdentity,
        region: str,
        service: str,
        *,
        hmac_kind: str = "sha256",
    ) -> None:
        """Create a new signature generator.

        :param identity: Credentials used for signing.
        :param region: The AWS region requests are sent to, e.g. ``us-east-1``.
        :param service: The signing name of the target service, e.g. ``ec2``.
        :param hmac_kind: The digest algorithm of the keyed-hash engine. Only
            ``sha256`` matches the ``AWS4-HMAC-SHA256`` algorithm.
        :raises MissingCredentialsError: If the access key or secret key is empty.
        :raises MissingExpectedParameterException: If region or service is empty.
        :raises UnsupportedAlgorithmError: If ``hmac_kind`` is not ``sha256``.
        """
        self._validate_identity(identity=identity)
        if not region:
            raise MissingExpectedParameterException(
                f"A region is required for signing. Current value: {region!r}"
            )
        if not service:
            raise MissingExpectedParameterException(
                f"A service is required for signing. Current value: {service!r}"
            )
        self._identity = identity
        self._region = region
        self._service = service
        self._hmac = Hmac(hmac_kind, identity.secret_access_key)
        if self._hmac.name != "sha256":
            raise UnsupportedAlgorithmError(
                f"{self.algorithm} requires sha256, not {hmac_kind!r}."
            )

    @classmethod
    def from_keys(
        cls,
        access_key: str,
        secret_key: str,
        region: str,
        service: str,
        session_token: str | None = None,
    ) -> "SigV4Signature":
        """Create a signature generator from a bare access key and secret key."""
        identity = AWSCredentialIdentity(
            access_key_id=access_key,
            secret_access_key=secret_key,
            session_token=session_token,
        )
        return cls(identity, region, service)

    @classmethod
    def from_properties(
        cls,
        identity: AWSCredentialIdentity,
        properties: SigV4SigningProperties,
    ) -> "SigV4Signature":
        """Create a signature generator from a set of signing properties."""
        return cls(
            identity,
            properties["region"],
            properties["service"],
            hmac_kind=properties.get("hmac_kind", "sha256"),
        )

    def __repr__(self) -> str:
        return (
            f"SigV4Signature(access_key={self.access_key!r}, "
            f"region={self._region!r}, service={self._service!r})"
        )

    @property
    def hmac(self) -> Hmac:
        return self._hmac

    @property
    def identity(self) -> AWSCredentialIdentity:
        return self._identity

    @property
    def access_key(self) -> str:
        return self._identity.access_key_id

    @property
    def region(self) -> str:
        return self._region

    @property
    def service(self) -> str:
        return self._service

    def generate(
        self,
        http_method: HTTPMethod | str,
        path: str,
        options: RequestOptions | None = None,
        *,
        date: datetime.datetime | None = None,
    ) -> str:
        """Generate the value of the ``Authorization`` header.

        The signing instant is read once and used for both the timestamp in the
        string to sign and the date in the credential scope.

        :param http_method: HTTP request method.
        :param path: Request path, passed through as-is.
        :param options: Request params, headers and body.
        :param date: The signing instant. Defaults to the current time.
        :returns: ``AWS4-HMAC-SHA256 Credential=..., SignedHeaders=...,
            Signature=...``
        """
        if self._identity.is_expired:
            raise ValueError(
                f"Provided identity expired at {self._identity.expiration}. Please "
                "refresh the credentials or update the expiration parameter."
            )
        options = options or RequestOptions()
        signing_date = _signing_instant(date)
        headers = options.get("headers") or {}
        if not any(name.lower() in ("x-amz-date", "date") for name in headers):
            warnings.warn(
                "Neither X-Amz-Date nor Date is included in the signed headers. "
                "The service will likely reject this signature.",
                AWSSDKWarning,
            )

        canonical_request = self.canonical_request(http_method, path, options)
        string_to_sign = self.string_to_sign(canonical_request, signing_date)
        signature = self.sign_request_string(string_to_sign, signing_date)
        return self.authorization_value(
            credential_scope=self.credential_scope(signing_date),
            signed_headers=self.signed_headers(headers),
            signature=signature,
        )

    def sign_request(
        self,
        http_method: HTTPMethod | str,
        path: str,
        options: RequestOptions | None = None,
        *,
        date: datetime.datetime | None = None,
    ) -> SignedRequest:
        """Sign a request and return the headers and body to send with it.

        ``X-Amz-Date`` is added from the signing instant unless ``X-Amz-Date`` or
        ``Date`` is already present, and ``X-Amz-Security-Token`` is added when the
        identity has a session token. The supplied options are not modified.
        """
        options = RequestOptions(**(options or {}))
        signing_date = _signing_instant(date)
        headers = dict(options.get("headers") or {})
        present = {name.lower() for name in headers}
        if "x-amz-date" not in present and "date" not in present:
            headers["X-Amz-Date"] = time_iso8601(signing_date)
        token = self._identity.session_token
        if token is not None and "x-amz-security-token" not in present:
            headers["X-Amz-Security-Token"] = token
        options["headers"] = headers

        authorization = self.generate(http_method, path, options, date=signing_date)
        headers["Authorization"] = authorization
        return SignedRequest(headers=headers, body=resolve_body(options))

    def authorization_value(
        self, *, credential_scope: str, signed_headers: str, signature: str
    ) -> str:
        """Assemble the ``Authorization`` header value.

        :param credential_scope:
            ``<date>/<region>/<service>/aws4_request``
        :param signed_headers:
            The ``;`` separated list of lower-cased signed header names.
        :param signature:
            Final hex signature of the string to sign.
        """
        return (
            f"{self.algorithm} Credential={self.access_key}/{credential_scope}, "
            f"SignedHeaders={signed_headers}, Signature={signature}"
        )

    def sign_request_string(
        self, string_to_sign: str, date: datetime.datetime
    ) -> str:
        """Sign the string to sign with the scoped signing key.

        :returns: The lowercase hex signature.
        """
        return self._hmac.hex_sign(string_to_sign, self.signing_key(date))

    def signing_key(self, date: datetime.datetime) -> bytes:
        """Derive the signing key scoped to the date, region and service.

        DateKey              = HMAC("AWS4"+"<SecretAccessKey>", "<YYYYMMDD>")
        DateRegionKey        = HMAC(<DateKey>, "<aws-region>")
        DateRegionServiceKey = HMAC(<DateRegionKey>, "<aws-service>")
        SigningKey           = HMAC(<DateRegionServiceKey>, "aws4_request")
        """
        k_date = self._hmac.sign(
            _signing_instant(date).strftime(SIGV4_DATE_FORMAT),
            f"AWS4{self._identity.secret_access_key}",
        )
        k_region = self._hmac.sign(self._region, k_date)
        k_service = self._hmac.sign(self._service, k_region)
        return self._hmac.sign(SIGV4_TERMINATOR, k_service)

    def credential_scope(self, date: datetime.datetime) -> str:
        # Scope format: <YYYYMMDD>/<AWS Region>/<AWS Service>/aws4_request
        return "/".join(
            (
                _signing_instant(date).strftime(SIGV4_DATE_FORMAT),
                self._region,
                self._service,
                SIGV4_TERMINATOR,
            )
        )

    def string_to_sign(self, canonical_request: str, date: datetime.datetime) -> str:
        """Build the string to sign.

        Defined as:
            Algorithm \\n
            RequestDateTime \\n
            CredentialScope \\n
            HashedCanonicalRequest
        """
        string_to_sign = "\n".join(
            (
                self.algorithm,
                time_iso8601(date),
                self.credential_scope(date),
                self.hashed_canonical_request(canonical_request),
            )
        )
        logger.debug("String to sign:\n%s", string_to_sign)
        return string_to_sign

    def hashed_canonical_request(self, canonical_request: str) -> str:
        return self._hmac.digest(canonical_request)

    def canonical_request(
        self,
        http_method: HTTPMethod | str,
        path: str,
        options: RequestOptions | None = None,
    ) -> str:
        """Build the canonical request string used for signing.

        Defined as:
            <HTTPMethod>\\n
            <CanonicalURI>\\n
            <CanonicalQueryString>\\n
            <CanonicalHeaders>\\n
            <SignedHeaders>\\n
            <HashedPayload>

        The canonical headers block carries its own trailing newline.
        """
        options = options or RequestOptions()
        headers = options.get("headers")
        canonical_request = "\n".join(
            (
                normalize_method(http_method),
                path,
                self.canonical_query(options.get("params")),
                self.canonical_headers(headers),
                self.signed_headers(headers),
                self.canonical_payload(options),
            )
        )
        logger.debug("Canonical request:\n%s", canonical_request)
        return canonical_request

    def canonical_query(self, params: Mapping[str, str] | None) -> str:
        """Build the canonical query string.

        Parameters are sorted by their unescaped key before escaping.
        """
        if not params:
            return ""
        return "&".join(
            f"{self.safe_escape(key)}={self.safe_escape(str(value))}"
            for key, value in sorted(params.items(), key=lambda item: item[0])
        )

    def canonical_headers(self, headers: Mapping[str, str] | None) -> str:
        """Render one ``name:value`` line per header.

        The block always ends in a newline, even when there are no headers.
        """
        lines = (
            f"{name}:{value}" for name, value in normalize_headers(headers).items()
        )
        return "\n".join(lines) + "\n"

    def signed_headers(self, headers: Mapping[str, str] | None) -> str:
        """List of header names included in the signature."""
        return ";".join(normalize_headers(headers))

    def canonical_payload(self, options: RequestOptions) -> str:
        """Hex digest of the request body."""
        return self._hmac.digest(resolve_body(options))

    def _validate_identity(self, *, identity: AWSCredentialIdentity) -> None:
        if not isinstance(identity, _AWSCredentialsIdentity):  # pyright: ignore
            raise ValueError(
                "Received unexpected value for identity parameter. Expected "
                f"AWSCredentialIdentity but received {type(identity)}."
            )
        if not identity.access_key_id:
            raise MissingCredentialsError("An access key is required for signing.")
        if not identity.secret_access_key:
            raise MissingCredentialsError("A secret key is required for signing.")
