# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import datetime
import logging
from copy import deepcopy
from dataclasses import dataclass
from typing import Final

from ._http import AWSRequest, Field, Fields
from ._identity import AWSCredentials
from .canonical import Payload, canonical_headers, canonical_request
from .constants import AUTHORIZATION_HEADER, DATE_HEADER, SIGV4_ALGORITHM
from .exceptions import InvalidCredentialsException
from .signing import (
    calculate_signature,
    credential_scope,
    derive_signing_key,
    format_timestamp,
    normalize_timestamp,
    string_to_sign,
)

logger: Final = logging.getLogger(__name__)


@dataclass(kw_only=True, frozen=True)
class SigningResult:
    """The values computed while signing a single request.

    It never holds the derived signing key.
    """

    timestamp: datetime.datetime
    """The signing instant, in UTC with whole-second precision."""

    canonical_request: str
    string_to_sign: str

    signed_headers: str
    """Header names covered by the signature, joined by ``;``."""

    signature: str
    """Lowercase hex encoded signature."""

    date: str
    """Value for the ``X-Amz-Date`` header."""

    authorization: str
    """Value for the ``Authorization`` header."""

    @property
    def headers(self) -> dict[str, str]:
        """The headers to attach to the outgoing request."""
        return {DATE_HEADER: self.date, AUTHORIZATION_HEADER: self.authorization}


def generate_authorization_header(
    *, access_key_id: str, scope: str, signed_headers: str, signature: str
) -> str:
    """Format the ``Authorization`` header value.

    :param access_key_id: The access key the signature was computed for.
    :param scope: Credential scope, ``<date>/<region>/<service>/aws4_request``.
    :param signed_headers: Header names used in signing, joined by ``;``.
    :param signature: Final hash of the SigV4 signing algorithm.
    """
    return (
        f"{SIGV4_ALGORITHM}, Credential={access_key_id}/{scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature}"
    )


class SigV4Signer:
    """Request signer for applying the AWS Signature Version 4 algorithm.

    A signer is bound to one set of credentials and holds no other state, so a
    single instance can sign requests from any number of threads.
    """

    def __init__(self, credentials: AWSCredentials) -> None:
        if not isinstance(credentials, AWSCredentials):  # pyright: ignore
            raise InvalidCredentialsException(
                "Received unexpected value for credentials parameter. Expected "
                f"AWSCredentials but received {type(credentials)}."
            )
        self._credentials = credentials

    @property
    def credentials(self) -> AWSCredentials:
        return self._credentials

    def sign(
        self,
        request: AWSRequest,
        payload: Payload = None,
        *,
        timestamp: datetime.datetime | None = None,
    ) -> AWSRequest:
        """Generate and apply a SigV4 signature to a copy of the supplied request.

        The copy carries ``X-Amz-Date`` and ``Authorization`` headers; ``request``
        itself is not modified.

        :param request: The request to sign prior to sending it to the service.
        :param payload: The raw request body.
        :param timestamp: The signing instant. Defaults to the current time.
        """
        new_request = deepcopy(request)
        result = self.compute(new_request, payload, timestamp=timestamp)
        for name, value in result.headers.items():
            new_request.fields.set_field(Field(name=name, values=[value]))
        return new_request

    def signature(
        self,
        request: AWSRequest,
        payload: Payload = None,
        *,
        timestamp: datetime.datetime | None = None,
    ) -> str:
        """Compute only the signature, for callers that build the
        ``Authorization`` header themselves."""
        return self.compute(request, payload, timestamp=timestamp).signature

    def compute(
        self,
        request: AWSRequest,
        payload: Payload = None,
        *,
        timestamp: datetime.datetime | None = None,
    ) -> SigningResult:
        """Run the signing pipeline without modifying ``request``.

        The ``X-Amz-Date`` value is part of the signed headers, and the same
        rendering is embedded in the string to sign.
        """
        if timestamp is None:
            timestamp = datetime.datetime.now(datetime.UTC)
        timestamp = normalize_timestamp(timestamp)
        date = format_timestamp(timestamp)
        region = self._credentials.region
        service = self._credentials.service

        fields = self._signing_fields(request=request, date=date)
        headers = canonical_headers(fields, request.host)
        creq = canonical_request(
            request.method, request.path, request.query, headers.block, payload
        )
        logger.debug("Calculated canonical request:\n%s", creq)

        sts = string_to_sign(timestamp, region, service, creq)
        logger.debug("Calculated string to sign:\n%s", sts)

        signature = calculate_signature(
            derive_signing_key(
                self._credentials.secret_access_key, timestamp, region, service
            ),
            sts,
        )

        scope = credential_scope(timestamp, region, service)
        logger.debug(
            "Signed %s request to %s with scope %s and signed headers %s",
            creq.partition("\n")[0],
            request.host,
            scope,
            headers.signed_headers,
        )
        return SigningResult(
            timestamp=timestamp,
            canonical_request=creq,
            string_to_sign=sts,
            signed_headers=headers.signed_headers,
            signature=signature,
            date=date,
            authorization=generate_authorization_header(
                access_key_id=self._credentials.access_key_id,
                scope=scope,
                signed_headers=headers.signed_headers,
                signature=signature,
            ),
        )

    def _signing_fields(self, *, request: AWSRequest, date: str) -> Fields:
        # Authorization is never part of the signed headers.
        fields = deepcopy(request.fields)
        if AUTHORIZATION_HEADER in fields:
            del fields[AUTHORIZATION_HEADER]
        fields.set_field(Field(name=DATE_HEADER, values=[date]))
        return fields
