"""
Pytest configuration and shared fixtures.

Registers the ``integration`` marker (tests that need real Azure Document
Intelligence or Service Bus resources) and the ``--run-integration`` option.
"""

import pytest


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against real Azure OCR and Service Bus resources"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: test needs AZ_DI_* or SERVICE_BUS_* settings pointing at real Azure resources"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def restore_taxonomy():
    """Put the demo taxonomy back after a test replaces it"""
    yield
    from billscan.services.storage import taxonomy_store
    from billscan.services.storage.taxonomy import DEMO_TAXONOMY, TaxonomyStore

    taxonomy_store.replace(TaxonomyStore(seed=DEMO_TAXONOMY).list_categories())
