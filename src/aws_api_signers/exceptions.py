# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0


class AWSSDKWarning(UserWarning): ...


class BaseAWSSDKException(Exception):
    """Top-level exception to capture signing-related errors."""


class UnsupportedAlgorithmError(BaseAWSSDKException, ValueError):
    """The requested hash algorithm is not available to the keyed-hash engine."""


class MissingExpectedParameterException(BaseAWSSDKException, ValueError):
    """Signing requires specific properties, such as region and service, to be
    present."""


class MissingCredentialsError(MissingExpectedParameterException):
    """An access key or secret key was missing or empty."""
