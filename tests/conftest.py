"""Shared pytest fixtures for the Portfolio Advisor test suite."""

import pytest

from helpers import FakeProvider, OutageProvider, make_answers


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def outage_provider():
    return OutageProvider()


@pytest.fixture
def moderate_answers():
    """A,B,B,C,B -> 1+2+2+3+2 = 10 -> moderate."""
    return make_answers("ABBCB")
