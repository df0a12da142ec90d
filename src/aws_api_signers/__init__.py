# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""AWS API Signers computes AWS Signature Version 4 ``Authorization`` values for
HTTP requests without depending on any particular HTTP client."""

from ._identity import AWSCredentialIdentity
from .hashing import Hmac
from .interfaces.signing import RequestOptions, RequestSigner, SigV4SigningProperties
from .signers import (
    EMPTY_SHA256_HASH,
    Signature,
    SignedRequest,
    SigV4Signature,
    time_iso8601,
)

__license__ = "Apache-2.0"
__version__ = "0.1.0"

__all__ = (
    "EMPTY_SHA256_HASH",
    "AWSCredentialIdentity",
    "Hmac",
    "RequestOptions",
    "RequestSigner",
    "SigV4Signature",
    "SigV4SigningProperties",
    "Signature",
    "SignedRequest",
    "time_iso8601",
)
