# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from dataclasses import dataclass, field


@dataclass(kw_only=True, frozen=True)
class AWSCredentials:
    """Credentials and scope used to sign requests for a single service.

    Instances are immutable and may be shared by any number of concurrent signing
    calls. To change region, service, or keys, construct a new value.
    """

    access_key_id: str
    """A unique identifier for an AWS user or role."""

    secret_access_key: str = field(repr=False)
    """A secret key used in conjunction with the access key ID. Never logged."""

    region: str
    """The region the signed request is scoped to, for example ``us-east-1``."""

    service: str
    """The signing name of the target service, for example ``iam``."""
