# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Canonical request construction for Signature Version 4.

The canonical request is a standardized rendering of the request that the
signer and the receiving service compute independently. Any difference in case,
ordering, whitespace, or encoding produces a different hash, so every function
here is an exact, order-stable string transform.
"""

from hashlib import sha256
from http import HTTPMethod
from typing import NamedTuple, TypeAlias
from urllib.parse import quote

from ._http import Field, Fields, QueryParams
from .constants import EMPTY_SHA256_HASH, HOST_HEADER
from .exceptions import MalformedRequestException

Payload: TypeAlias = bytes | bytearray | memoryview | str | None


class CanonicalHeaders(NamedTuple):
    signed_headers: str
    """Sorted, lower-cased header names joined by ``;``."""

    block: str
    """The ``name:value`` lines, a blank line, then ``signed_headers``."""


def canonical_headers(fields: Fields, host: str) -> CanonicalHeaders:
    """Render the headers of a request in canonical form.

    Header names are lower-cased and sorted. Multiple values for a name are joined
    with a single space and otherwise left untouched. The ``host`` entry always
    comes from ``host``, replacing any supplied ``Host`` field.

    :param fields: The request headers.
    :param host: The host the request is sent to.
    """
    normalized: dict[str, str] = {
        field.name.lower(): _format_field_value(field) for field in fields
    }
    normalized[HOST_HEADER] = host

    names = sorted(normalized)
    signed_headers = ";".join(names)
    lines = "".join(f"{name}:{normalized[name]}\n" for name in names)
    return CanonicalHeaders(
        signed_headers=signed_headers, block=f"{lines}\n{signed_headers}"
    )


def _format_field_value(field: Field) -> str:
    for value in field.values:
        if not isinstance(value, str):
            raise MalformedRequestException(
                f"Values of header {field.name!r} must be str, "
                f"received {type(value).__name__}."
            )
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise MalformedRequestException(
                f"A value of header {field.name!r} can't be encoded as UTF-8."
            ) from e
    return " ".join(field.values)


def canonical_query_string(query: QueryParams | None) -> str:
    """Percent-encode and sort query parameters.

    Names and values are encoded with RFC 3986 rules, where only unreserved
    characters are left as-is, then ordered by name and by value for repeated
    names. An empty query yields an empty string.
    """
    if not query:
        return ""

    pairs: list[tuple[str, str]] = []
    for name, values in query.items():
        if isinstance(values, str):
            values = [values]
        encoded_name = _uri_encode(name)
        pairs.extend((encoded_name, _uri_encode(value)) for value in values)
    # key-value pairs must be in sorted order for their encoded forms.
    return "&".join(f"{name}={value}" for name, value in sorted(pairs))


def _uri_encode(value: str) -> str:
    if not isinstance(value, str):
        raise MalformedRequestException(
            f"Query parameters must be str, received {type(value).__name__}."
        )
    try:
        return quote(string=value, safe="")
    except UnicodeEncodeError as e:
        raise MalformedRequestException(
            "Query parameter can't be encoded as UTF-8."
        ) from e


def hash_payload(payload: Payload) -> str:
    """Hex encoded SHA-256 digest of the request payload.

    ``str`` payloads are hashed as UTF-8. ``None`` is treated as an empty payload.
    """
    if payload is None:
        return EMPTY_SHA256_HASH
    if isinstance(payload, str):
        try:
            payload = payload.encode("utf-8")
        except UnicodeEncodeError as e:
            raise MalformedRequestException(
                "Payload can't be encoded as UTF-8."
            ) from e
    elif not isinstance(payload, bytes | bytearray | memoryview):
        raise MalformedRequestException(
            f"Payload must be bytes or str, received {type(payload).__name__}."
        )
    return sha256(payload).hexdigest()


def normalize_method(method: HTTPMethod | str) -> str:
    """Resolve ``method`` to an upper-case standard HTTP verb."""
    if not isinstance(method, str):
        raise MalformedRequestException(
            f"HTTP method must be str, received {type(method).__name__}."
        )
    try:
        return HTTPMethod(method.upper()).value
    except ValueError as e:
        raise MalformedRequestException(f"Unsupported HTTP method: {method!r}") from e


def canonical_request(
    method: HTTPMethod | str,
    path: str,
    query: QueryParams | None,
    canonical_headers_block: str,
    payload: Payload,
) -> str:
    """Assemble the canonical request.

    The SigV4 specification defines the canonical request to be::

        <HTTPMethod>\\n
        <CanonicalURI>\\n
        <CanonicalQueryString>\\n
        <CanonicalHeaders>\\n
        <SignedHeaders>\\n
        <HashedPayload>

    ``canonical_headers_block`` carries both the canonical headers and the signed
    header list, as produced by :func:`canonical_headers`.

    :param method: The HTTP verb.
    :param path: The path as sent on the wire, already percent-escaped.
    :param query: Unencoded query parameters.
    :param canonical_headers_block: ``CanonicalHeaders.block``.
    :param payload: The raw request body.
    """
    if not isinstance(path, str) or not path:
        raise MalformedRequestException(
            "Request path must be a non-empty string; use '/' for the root path."
        )
    return (
        f"{normalize_method(method)}\n"
        f"{path}\n"
        f"{canonical_query_string(query)}\n"
        f"{canonical_headers_block}\n"
        f"{hash_payload(payload)}"
    )
