# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""AWS Request Signer computes AWS Signature Version 4 signatures for HTTP requests
without depending on a particular HTTP client."""

from __future__ import annotations

from ._http import AWSRequest, Field, Fields
from ._identity import AWSCredentials
from .canonical import (
    CanonicalHeaders,
    canonical_headers,
    canonical_query_string,
    canonical_request,
    hash_payload,
)
from .signers import SigningResult, SigV4Signer, generate_authorization_header
from .signing import (
    SigningKeyChain,
    calculate_signature,
    credential_scope,
    derive_signing_key,
    signing_key_chain,
    string_to_sign,
)

__license__ = "Apache-2.0"
__version__ = "0.1.0"

__all__ = (
    "AWSCredentials",
    "AWSRequest",
    "CanonicalHeaders",
    "Field",
    "Fields",
    "SigV4Signer",
    "SigningKeyChain",
    "SigningResult",
    "calculate_signature",
    "canonical_headers",
    "canonical_query_string",
    "canonical_request",
    "credential_scope",
    "derive_signing_key",
    "generate_authorization_header",
    "hash_payload",
    "signing_key_chain",
    "string_to_sign",
)
