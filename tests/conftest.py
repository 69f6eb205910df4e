"""
Pytest Configuration and Fixtures.
Shared test fixtures for all test modules.
"""

import pytest

from claimguard.core.enums import ClaimStatus
from tests.fakes import InMemoryAlertSink, InMemoryClaimStore, make_claim, make_item


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def claim_store():
    return InMemoryClaimStore()


@pytest.fixture
def alert_sink():
    return InMemoryAlertSink()


@pytest.fixture
def adjudicable_claim():
    """Single 200.00 non-copay item, in network."""
    return make_claim(items=[make_item("80053", "200.00")], status=ClaimStatus.SUBMITTED)


@pytest.fixture
def worked_example_benefits():
    return {
        "deductible": {"individual": 500, "remainingIndividual": 50},
        "coinsurance": {"inNetwork": 20, "outOfNetwork": 40},
    }


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
