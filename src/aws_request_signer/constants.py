# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from typing import Final

SIGV4_ALGORITHM: Final = "AWS4-HMAC-SHA256"
"""Algorithm identifier for HMAC-SHA256 based request signing."""

SIGV4_TIMESTAMP_FORMAT: Final = "%Y%m%dT%H%M%SZ"
SIGV4_DATE_FORMAT: Final = "%Y%m%d"
SCOPE_TERMINATOR: Final = "aws4_request"
SECRET_KEY_PREFIX: Final = "AWS4"

DATE_HEADER: Final = "X-Amz-Date"
AUTHORIZATION_HEADER: Final = "Authorization"
HOST_HEADER: Final = "host"

EMPTY_SHA256_HASH: Final = (
    "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
)
