# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0


class SigningException(Exception):
    """Top-level exception to capture request signing errors."""


class MalformedRequestException(SigningException, ValueError):
    """A request component can't be rendered into a canonical request."""


class InvalidCredentialsException(SigningException, ValueError):
    """The signer was given something other than a set of AWS credentials."""
