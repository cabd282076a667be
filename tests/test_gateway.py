# SPDX-License-Identifier: Apache-2.0
"""Gateway client against a FastAPI stand-in and failing transports."""
import asyncio

import httpx
import pytest

from fakes import CONTRACT, HANDLE, PUBLIC_KEY_HEX, USER, RecordingTransport, asgi_client, make_gateway_app
from fhevmsdk.config import ClientConfig
from fhevmsdk.exceptions import GatewayError, ProtocolError, TransportError
from fhevmsdk.gateway import GatewayClient
from fhevmsdk.schemas import AuthorizationSignature, DecryptionRequest, EncryptionContext

CONFIG = ClientConfig(chain_id=11155111)


def _request():
    return DecryptionRequest.build(
        HANDLE,
        EncryptionContext.of(CONTRACT, USER),
        AuthorizationSignature(signature="0xsig", public_key=PUBLIC_KEY_HEX),
    )


def _decrypt(app=None, transport=None):
    async def run():
        http = asgi_client(app) if app is not None else httpx.AsyncClient(transport=transport)
        async with http:
            return await GatewayClient(CONFIG, http).request_decryption(_request())

    return asyncio.run(run())


def test_request_body_is_exactly_five_fields():
    app = make_gateway_app(value=42)
    result = _decrypt(app)
    assert result.value == 42
    assert app.state.requests == [
        {
            "handle": HANDLE,
            "contractAddress": CONTRACT,
            "userAddress": USER,
            "signature": "0xsig",
            "publicKey": PUBLIC_KEY_HEX,
        }
    ]


def test_posts_to_decrypt_path():
    transport = RecordingTransport()
    _decrypt(transport=transport)
    (request,) = transport.seen
    assert request.method == "POST"
    assert str(request.url) == "https://gateway.sepolia.zama.ai/decrypt"


def test_boolean_value_kept_boolean():
    result = _decrypt(make_gateway_app(value=True))
    assert result.value is True


def test_http_500_is_gateway_error():
    with pytest.raises(GatewayError) as excinfo:
        _decrypt(make_gateway_app(status_code=500))
    assert excinfo.value.status_code == 500
    assert excinfo.value.status_text == "Internal Server Error"


def test_malformed_json_on_200_is_protocol_error():
    with pytest.raises(ProtocolError):
        _decrypt(make_gateway_app(raw_body=b"{not json"))


@pytest.mark.parametrize("body", [b"[1, 2]", b'{"result": 1}', b'{"value": "42"}', b'{"value": 1.5}', b'{"value": null}'])
def test_unexpected_shapes_are_protocol_errors(body):
    with pytest.raises(ProtocolError):
        _decrypt(make_gateway_app(raw_body=body))


def test_gateway_and_protocol_errors_are_distinct():
    assert not issubclass(GatewayError, ProtocolError)
    assert not issubclass(ProtocolError, GatewayError)


def test_connection_failure_is_transport_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as excinfo:
        _decrypt(transport=httpx.MockTransport(refuse))
    assert isinstance(excinfo.value.cause, httpx.ConnectError)


def test_timeout_is_transport_error():
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TransportError, match="timed out"):
        _decrypt(transport=httpx.MockTransport(slow))


def test_fetch_public_key_json_and_raw():
    async def run(app_or_transport):
        http = httpx.AsyncClient(transport=app_or_transport)
        async with http:
            return await GatewayClient(CONFIG, http).fetch_public_key()

    json_key = asyncio.run(run(httpx.ASGITransport(app=make_gateway_app())))
    assert json_key == bytes.fromhex(PUBLIC_KEY_HEX)

    raw = httpx.MockTransport(lambda request: httpx.Response(200, content=b"\x01\x02"))
    assert asyncio.run(run(raw)) == b"\x01\x02"

    broken = httpx.MockTransport(lambda request: httpx.Response(200, json={"key": "ab"}))
    with pytest.raises(ProtocolError):
        asyncio.run(run(broken))


def test_owned_client_closed_on_exit():
    async def run():
        async with GatewayClient(CONFIG) as gateway:
            http = gateway._http
        return http.is_closed

    assert asyncio.run(run()) is True
