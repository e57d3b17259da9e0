# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import hmac
from datetime import UTC, datetime
from hashlib import sha256
from typing import NamedTuple

from .constants import (
    SCOPE_TERMINATOR,
    SECRET_KEY_PREFIX,
    SIGV4_ALGORITHM,
    SIGV4_DATE_FORMAT,
    SIGV4_TIMESTAMP_FORMAT,
)


def normalize_timestamp(timestamp: datetime) -> datetime:
    """Convert ``timestamp`` to UTC and truncate it to whole seconds.

    Naive datetimes are assumed to already be in UTC.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return timestamp.astimezone(UTC).replace(microsecond=0)


def format_timestamp(timestamp: datetime) -> str:
    """Render ``timestamp`` as ``YYYYMMDDTHHMMSSZ``."""
    return normalize_timestamp(timestamp).strftime(SIGV4_TIMESTAMP_FORMAT)


def format_date(timestamp: datetime) -> str:
    """Render ``timestamp`` as ``YYYYMMDD``."""
    return normalize_timestamp(timestamp).strftime(SIGV4_DATE_FORMAT)


def credential_scope(timestamp: datetime, region: str, service: str) -> str:
    # Scope format: <YYYYMMDD>/<AWS Region>/<AWS Service>/aws4_request
    return f"{format_date(timestamp)}/{region}/{service}/{SCOPE_TERMINATOR}"


def string_to_sign(
    timestamp: datetime, region: str, service: str, canonical_request: str
) -> str:
    """Wrap a hash of the canonical request with the signing metadata.

    The SigV4 specification defines the string to sign as::

        Algorithm \\n
        RequestDateTime \\n
        CredentialScope \\n
        HashedCanonicalRequest

    ``RequestDateTime`` must be the exact value sent in the ``X-Amz-Date`` header.
    """
    return (
        f"{SIGV4_ALGORITHM}\n"
        f"{format_timestamp(timestamp)}\n"
        f"{credential_scope(timestamp, region, service)}\n"
        f"{sha256(canonical_request.encode()).hexdigest()}"
    )


class SigningKeyChain(NamedTuple):
    k_date: bytes
    k_region: bytes
    k_service: bytes
    k_signing: bytes


def signing_key_chain(
    secret_access_key: str, timestamp: datetime, region: str, service: str
) -> SigningKeyChain:
    """Run the four HMAC stages that scope the secret key.

    Each stage keys the next one, so the stages can't be reordered or skipped,
    even for empty values::

        DateKey              = HMAC-SHA256("AWS4"+"<SecretAccessKey>", "<YYYYMMDD>")
        DateRegionKey        = HMAC-SHA256(<DateKey>, "<aws-region>")
        DateRegionServiceKey = HMAC-SHA256(<DateRegionKey>, "<aws-service>")
        SigningKey           = HMAC-SHA256(<DateRegionServiceKey>, "aws4_request")
    """
    k_date = _hmac(
        key=f"{SECRET_KEY_PREFIX}{secret_access_key}".encode(),
        value=format_date(timestamp),
    )
    k_region = _hmac(key=k_date, value=region)
    k_service = _hmac(key=k_region, value=service)
    k_signing = _hmac(key=k_service, value=SCOPE_TERMINATOR)
    return SigningKeyChain(k_date, k_region, k_service, k_signing)


def derive_signing_key(
    secret_access_key: str, timestamp: datetime, region: str, service: str
) -> bytes:
    """Derive the 32 byte signing key for one date, region, and service."""
    return signing_key_chain(secret_access_key, timestamp, region, service).k_signing


def calculate_signature(signing_key: bytes, string_to_sign: str) -> str:
    return _hmac(key=signing_key, value=string_to_sign).hex()


def _hmac(key: bytes, value: str) -> bytes:
    return hmac.new(key=key, msg=value.encode(), digestmod=sha256).digest()
