# Data Quality Analyzer - Pytest Configuration
# Shared fixtures and configuration for all tests

import sys
import os

import pytest

# Add parent to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


# =============================================================================
# Dataset Fixtures
# =============================================================================

@pytest.fixture(scope='session')
def sample_factory():
    """Session-scoped sample data factory."""
    from tests.sample_data import SampleDataFactory
    return SampleDataFactory()


@pytest.fixture
def customer_records(sample_factory):
    return sample_factory.customers()


@pytest.fixture
def customer_analysis(customer_records):
    """Analysis of the customer records."""
    from quality_analyzer.ml.data_quality import analyze_dataset
    return analyze_dataset(customer_records, "customers.csv")


# =============================================================================
# Collaborator Fixtures
# =============================================================================

@pytest.fixture
def fake_llm():
    """Text-generation service answering with one valid recommendation."""
    from tests.fakes import FakeCompletionService
    return FakeCompletionService(
        '[{"priority": "High", "issue": "Blank emails", "suggestion": "Collect emails"}]'
    )


@pytest.fixture
def api_client():
    """TestClient with the recommendation engine pinned to rule-based mode."""
    from fastapi.testclient import TestClient

    from quality_analyzer.api.routes.quality import get_engine
    from quality_analyzer.main import create_application
    from quality_analyzer.ml.recommendations import RecommendationEngine

    app = create_application()
    app.dependency_overrides[get_engine] = lambda: RecommendationEngine()

    with TestClient(app) as client:
        yield client
