# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Pytest fixtures for error capture tests."""

import pytest

from error_capture.client import ErrorCaptureClient
from error_capture.diagnostics import SilentLogger, set_default_logger
from error_capture.registry import HandlerRegistry
from error_capture.silent_transport import SilentTransport


@pytest.fixture(autouse=True)
def silent_default_logger():
    """Keep diagnostics out of test output."""
    logger = SilentLogger()
    set_default_logger(logger)
    yield logger
    set_default_logger(None)


@pytest.fixture
def diagnostics():
    return SilentLogger()


@pytest.fixture
def transport(diagnostics):
    return SilentTransport(logger=diagnostics)


@pytest.fixture
def client(transport, diagnostics):
    return ErrorCaptureClient(transport, logger=diagnostics)


@pytest.fixture
def registry(client, diagnostics):
    """Registry that never sees a real last error and always restores hooks."""
    registry = HandlerRegistry(client, logger=diagnostics, last_error=lambda: None)
    yield registry
    registry.restore()
