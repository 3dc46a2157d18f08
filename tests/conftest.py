"""Pytest configuration and shared fixtures for multilabel_cutoffs tests.

This module provides pytest configuration, shared fixtures, and test utilities
that are available across all test modules.
"""

import pytest

from tests.fixtures.data_generators import generate_multilabel_data


def pytest_configure(config):
    """Configure pytest settings and custom markers."""
    # Register custom markers
    config.addinivalue_line("markers", "slow: mark test as slow running (>1 second)")
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "edge_case: mark test as an edge case test")
    config.addinivalue_line("markers", "validation: mark test as a validation test")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "edge_cases/" in str(item.fspath):
            item.add_marker(pytest.mark.edge_case)
        elif "validation/" in str(item.fspath):
            item.add_marker(pytest.mark.validation)


def pytest_runtest_setup(item):
    """Skip slow tests unless explicitly requested."""
    if item.get_closest_marker("slow"):
        if not item.config.getoption("--runslow", default=False):
            pytest.skip("need --runslow option to run slow tests")


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--runslow", action="store_true", default=False, help="run slow tests"
    )


@pytest.fixture(scope="function")
def sample_multilabel_data():
    """Confidences correlated with a (60, 5) ground truth matrix."""
    return generate_multilabel_data(n_samples=60, n_labels=5, random_state=0)


# Parametrized fixtures for common test scenarios
@pytest.fixture(
    params=[
        "hamming_loss",
        "example_based_f_measure",
        "example_based_accuracy",
        "subset_accuracy",
    ]
)
def measure_name(request):
    """Parametrized fixture for different measures."""
    return request.param
