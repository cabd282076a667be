# SPDX-License-Identifier: Apache-2.0
"""pytest fixtures wired to the fakes in fakes.py."""
import pytest

from fakes import CONTRACT, PUBLIC_KEY_HEX, SEPOLIA, USER, FakeEngineFactory
from fhevmsdk import ClientConfig, EncryptionContext, FhevmClient


@pytest.fixture
def config():
    return ClientConfig(chain_id=SEPOLIA, public_key=bytes.fromhex(PUBLIC_KEY_HEX))


@pytest.fixture
def context():
    return EncryptionContext.of(CONTRACT, USER)


@pytest.fixture
def engine_factory():
    return FakeEngineFactory()


@pytest.fixture
def make_client(config, engine_factory):
    """Build a client wired to the fake engine and the given httpx client."""

    def _make(http_client=None, **kwargs):
        return FhevmClient(config, engine_factory, http_client=http_client, **kwargs)

    return _make
