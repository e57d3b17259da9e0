import copy
import logging
import re
import threading
import typing
from datetime import UTC, datetime, timedelta, timezone

import pytest
from aws_request_signer import (
    AWSCredentials,
    AWSRequest,
    Field,
    Fields,
    SigV4Signer,
    generate_authorization_header,
)
from aws_request_signer.exceptions import (
    InvalidCredentialsException,
    MalformedRequestException,
)
from freezegun import freeze_time

SECRET_KEY: str = "wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY"
ACCESS_KEY: str = "AKIDEXAMPLE"

DATE: datetime = datetime(
    year=2015, month=8, day=30, hour=12, minute=36, second=0, tzinfo=UTC
)
SIGNING_KEY_HEX: str = "c4afb1cc5771d871763a393e44b703571b55cc28424d1a5e86da6ed3c154a4b9"
SIGNATURE: str = "5d672d79c15b13162d9279b0855cfba6789a8edb4c82c400e06b5924a6f2b5d7"
EXPECTED_AUTHORIZATION: str = (
    "AWS4-HMAC-SHA256, "
    "Credential=AKIDEXAMPLE/20150830/us-east-1/iam/aws4_request, "
    "SignedHeaders=content-type;host;x-amz-date, "
    f"Signature={SIGNATURE}"
)

SIGV4_RE = re.compile(
    r"AWS4-HMAC-SHA256, "
    r"Credential=(?P<access_key>\w+)/(?P<date>\d{8})/"
    r"(?P<region>[a-z0-9-]+)/(?P<service>[a-z0-9-]+)/aws4_request, "
    r"SignedHeaders=(?P<signed_headers>[a-z0-9;-]+), "
    r"Signature=(?P<signature>[0-9a-f]{64})$"
)


@pytest.fixture(scope="module")
def credentials() -> AWSCredentials:
    return AWSCredentials(
        access_key_id=ACCESS_KEY,
        secret_access_key=SECRET_KEY,
        region="us-east-1",
        service="iam",
    )


@pytest.fixture
def signer(credentials: AWSCredentials) -> SigV4Signer:
    return SigV4Signer(credentials)


@pytest.fixture
def aws_request() -> AWSRequest:
    return AWSRequest(
        method="GET",
        host="iam.amazonaws.com",
        path="/",
        query={"Action": "ListUsers", "Version": "2010-05-08"},
        fields=Fields(
            [
                Field(
                    name="Content-Type",
                    values=["application/x-www-form-urlencoded; charset=utf-8"],
                )
            ]
        ),
    )


class TestSigV4Signer:
    def test_published_vector(
        self, signer: SigV4Signer, aws_request: AWSRequest
    ) -> None:
        result = signer.compute(aws_request, b"", timestamp=DATE)
        assert result.signature == SIGNATURE
        assert result.signed_headers == "content-type;host;x-amz-date"
        assert result.string_to_sign.endswith(
            "f536975d06c0309214f805bb90ccff089219ecd68b2577efef23edd43b7e1a59"
        )
        assert result.canonical_request.endswith(
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )
        assert result.date == "20150830T123600Z"
        assert result.authorization == EXPECTED_AUTHORIZATION

    def test_sign(self, signer: SigV4Signer, aws_request: AWSRequest) -> None:
        signed_request = signer.sign(aws_request, timestamp=DATE)
        assert isinstance(signed_request, AWSRequest)
        assert signed_request is not aws_request
        assert signed_request.fields["X-Amz-Date"].as_string() == "20150830T123600Z"
        authorization = signed_request.fields["authorization"].as_string()
        assert authorization == EXPECTED_AUTHORIZATION
        assert SIGV4_RE.match(authorization)

    def test_sign_doesnt_modify_original_request(
        self, signer: SigV4Signer, aws_request: AWSRequest
    ) -> None:
        original_request = copy.deepcopy(aws_request)
        signed_request = signer.sign(aws_request, timestamp=DATE)
        assert aws_request.fields == original_request.fields
        assert aws_request.query == original_request.query
        assert signed_request.fields != aws_request.fields
        assert "X-Amz-Date" not in aws_request.fields
        assert "Authorization" not in aws_request.fields

    def test_compute_doesnt_modify_request(
        self, signer: SigV4Signer, aws_request: AWSRequest
    ) -> None:
        original_fields = copy.deepcopy(aws_request.fields)
        signer.compute(aws_request, timestamp=DATE)
        assert aws_request.fields == original_fields

    def test_signature(self, signer: SigV4Signer, aws_request: AWSRequest) -> None:
        assert signer.signature(aws_request, None, timestamp=DATE) == SIGNATURE

    def test_date_header_matches_string_to_sign(
        self, signer: SigV4Signer, aws_request: AWSRequest
    ) -> None:
        timestamp = datetime(2024, 2, 29, 23, 59, 59, 123456, tzinfo=UTC)
        result = signer.compute(aws_request, timestamp=timestamp)
        assert result.date == "20240229T235959Z"
        assert result.string_to_sign.split("\n")[1] == result.date
        assert f"x-amz-date:{result.date}\n" in result.canonical_request
        assert result.headers == {
            "X-Amz-Date": result.date,
            "Authorization": result.authorization,
        }

    @freeze_time("2015-08-30 12:36:00")
    def test_defaults_to_current_time(
        self, signer: SigV4Signer, aws_request: AWSRequest
    ) -> None:
        result = signer.compute(aws_request)
        assert result.timestamp == DATE
        assert result.signature == SIGNATURE

    def test_timezone_is_normalized(
        self, signer: SigV4Signer, aws_request: AWSRequest
    ) -> None:
        local = datetime(2015, 8, 30, 14, 36, 0, tzinfo=timezone(timedelta(hours=2)))
        assert signer.signature(aws_request, timestamp=local) == SIGNATURE

    def test_is_deterministic(
        self, signer: SigV4Signer, aws_request: AWSRequest
    ) -> None:
        first = signer.compute(aws_request, b"payload", timestamp=DATE)
        second = signer.compute(aws_request, b"payload", timestamp=DATE)
        assert first == second

    def test_header_order_doesnt_change_signature(self, signer: SigV4Signer) -> None:
        def build(order: list[tuple[str, str]]) -> AWSRequest:
            return AWSRequest(
                method="POST",
                host="dynamodb.us-east-1.amazonaws.com",
                fields=Fields([Field(name=k, values=[v]) for k, v in order]),
            )

        entries = [
            ("Content-Type", "application/x-amz-json-1.0"),
            ("X-Amz-Target", "DynamoDB_20120810.GetItem"),
        ]
        body = b'{"TableName": "test-table"}'
        forward = signer.signature(build(entries), body, timestamp=DATE)
        backward = signer.signature(build(entries[::-1]), body, timestamp=DATE)
        assert forward == backward

    def test_payload_changes_signature(
        self, signer: SigV4Signer, aws_request: AWSRequest
    ) -> None:
        empty = signer.signature(aws_request, b"", timestamp=DATE)
        non_empty = signer.signature(aws_request, b"body", timestamp=DATE)
        assert empty != non_empty

    def test_existing_date_header_is_replaced(
        self, signer: SigV4Signer, aws_request: AWSRequest
    ) -> None:
        aws_request.fields.set_field(
            Field(name="x-amz-date", values=["19700101T000000Z"])
        )
        signed_request = signer.sign(aws_request, timestamp=DATE)
        assert signed_request.fields["X-Amz-Date"].values == ["20150830T123600Z"]
        assert (
            signed_request.fields["Authorization"].as_string()
            == EXPECTED_AUTHORIZATION
        )

    def test_existing_authorization_is_not_signed(
        self, signer: SigV4Signer, aws_request: AWSRequest
    ) -> None:
        aws_request.fields.set_field(Field(name="Authorization", values=["stale"]))
        result = signer.compute(aws_request, timestamp=DATE)
        assert "authorization" not in result.signed_headers
        assert result.signature == SIGNATURE

        signed_request = signer.sign(aws_request, timestamp=DATE)
        assert signed_request.fields["Authorization"].values == [EXPECTED_AUTHORIZATION]

    def test_malformed_request_raises(self, signer: SigV4Signer) -> None:
        request = AWSRequest(method="GET", host="example.amazonaws.com", path="")
        with pytest.raises(MalformedRequestException):
            signer.sign(request, timestamp=DATE)

    @typing.no_type_check
    def test_invalid_credentials(self) -> None:
        """Ignore typing as we're testing an invalid input state."""
        with pytest.raises(InvalidCredentialsException):
            SigV4Signer(object())
        with pytest.raises(ValueError):
            SigV4Signer({"access_key_id": ACCESS_KEY})

    def test_secret_is_not_logged(
        self,
        signer: SigV4Signer,
        aws_request: AWSRequest,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="aws_request_signer"):
            result = signer.compute(aws_request, timestamp=DATE)
        assert result.canonical_request in caplog.text
        assert result.string_to_sign in caplog.text
        assert SECRET_KEY not in caplog.text
        assert SIGNING_KEY_HEX not in caplog.text

    def test_shared_across_threads(
        self, signer: SigV4Signer, aws_request: AWSRequest
    ) -> None:
        signatures: list[str] = []

        def sign() -> None:
            signatures.append(signer.signature(aws_request, timestamp=DATE))

        threads = [threading.Thread(target=sign) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert signatures == [SIGNATURE] * 8


def test_generate_authorization_header() -> None:
    header = generate_authorization_header(
        access_key_id="AKID",
        scope="20150830/us-west-2/ec2/aws4_request",
        signed_headers="host;x-amz-date",
        signature="0" * 64,
    )
    assert header == (
        "AWS4-HMAC-SHA256, Credential=AKID/20150830/us-west-2/ec2/aws4_request, "
        f"SignedHeaders=host;x-amz-date, Signature={'0' * 64}"
    )
