"""Tests for the http-tool command line interface."""

import json
import sys
from http import HTTPStatus

import pytest
from click.testing import CliRunner
from loguru import logger
from swapi import TEST_URL, status_handler

import courier.cli
from courier import Configuration, HTTPClient, TransportConfig
from courier.cli import cli


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def clients(monkeypatch, transport):
    """Route every client the CLI creates to the mock transport."""
    created = []

    def make_client(host, scheme, port):
        created.append((host, scheme, port))
        configuration = Configuration(
            host=host,
            port=port,
            is_insecure=scheme == "http",
            transport_config=TransportConfig(transport=transport),
        )
        return HTTPClient(configuration)

    monkeypatch.setattr(courier.cli, "make_client", make_client)
    return created


class TestGetCommand:
    def test_get(self, runner, clients, transport, ok_handler, mock_data):
        transport.request_handler = ok_handler

        result = runner.invoke(cli, ["get", f"{TEST_URL}/?format=json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == json.loads(mock_data)
        assert '  "name": "Chewbacca"' in result.output
        assert clients == [("swapi.dev", "https", None)]
        assert str(transport.requests[0].url) == f"{TEST_URL}/?format=json"

    def test_get_insecure_with_port(self, runner, clients, transport, ok_handler):
        transport.request_handler = ok_handler

        result = runner.invoke(cli, ["get", "http://localhost:8000/api/people/13/"])

        assert result.exit_code == 0, result.output
        assert clients == [("localhost", "http", 8000)]
        assert str(transport.requests[0].url) == "http://localhost:8000/api/people/13/"

    def test_verbose(self, runner, clients, transport, ok_handler):
        transport.request_handler = ok_handler

        result = runner.invoke(cli, ["get", "--verbose", TEST_URL])

        assert result.exit_code == 0, result.output
        assert "HTTPRequest(" in result.output
        assert f"<Request> GET {TEST_URL}" in result.output
        assert "<Response> 200 OK" in result.output

    def test_invalid_url(self, runner, clients):
        result = runner.invoke(cli, ["get", "not-a-url"])

        assert result.exit_code == 2
        assert "Invalid URL" in result.output
        assert clients == []

    def test_error_response(self, runner, clients, transport):
        transport.request_handler = status_handler(HTTPStatus.NOT_FOUND)

        result = runner.invoke(cli, ["get", TEST_URL])

        assert result.exit_code == 1
        assert "404 Not Found" in result.output

    def test_connection_error(self, runner, clients):
        # No handler installed: the mock refuses to connect
        result = runner.invoke(cli, ["get", TEST_URL])

        assert result.exit_code == 1
        assert "ConnectError" in result.output

    def test_body_is_not_json(self, runner, clients, transport):
        transport.request_handler = status_handler(HTTPStatus.OK, b"<html></html>")

        result = runner.invoke(cli, ["get", TEST_URL])

        assert result.exit_code == 1
        assert "not valid JSON" in result.output


def test_help(runner):
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "get" in result.output
    assert "GETs a URL" in result.output
