"""Shared test fixtures and utilities."""

from http import HTTPStatus
from pathlib import Path

import pytest
from swapi import TEST_URL

from courier import Configuration, HTTPClient, MockTransport, TransportConfig, mock_response

RESOURCES = Path(__file__).parent / "resources"


def load_json(name: str) -> bytes:
    return (RESOURCES / f"{name}.json").read_bytes()


@pytest.fixture
def mock_data():
    """The SWAPI response for Chewbacca."""
    return load_json("chewbacca")


@pytest.fixture
def transport():
    """A mock transport with no handler installed."""
    return MockTransport()


@pytest.fixture
def config(transport):
    """Client configuration routing every request to the mock transport."""
    return Configuration(host="swapi.dev", transport_config=TransportConfig(transport=transport))


@pytest.fixture
def make_client(config):
    """Create clients from the shared configuration, applying overrides first."""

    def factory(**overrides):
        for name, value in overrides.items():
            setattr(config, name, value)
        return HTTPClient(config)

    return factory


@pytest.fixture
def ok_handler(mock_data):
    """Mock request handler answering every request with Chewbacca."""

    def handler(request):
        return mock_response(TEST_URL, HTTPStatus.OK), mock_data

    return handler
