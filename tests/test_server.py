"""
Unit tests for the extraction service
Tests: Health check, extraction results, error status codes
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, Mock, patch

from browser_tables.schemas import TableExtractionRequest, TableExtractionResult
from browser_tables.server import app
from tests.fakes import FakeTable, table_locator


@pytest.fixture
def client():
    return TestClient(app)


def fake_browser(mock_browser_cls, locator, launched=True, navigated=True):
    browser = mock_browser_cls.return_value
    browser.launch = AsyncMock(return_value=launched)
    browser.navigate = AsyncMock(return_value=navigated)
    browser.close = AsyncMock()
    browser.page = Mock()
    browser.page.locator.return_value = locator
    return browser


class TestRequestModel:
    """Test TableExtractionRequest defaults"""

    def test_minimal_request(self):
        request = TableExtractionRequest(url="https://example.com")

        assert request.table_selector == "table"
        assert request.header_row_selector == "thead>tr"
        assert request.body_cell_selector == "td"
        assert request.stability is None

    def test_url_required(self):
        with pytest.raises(Exception):  # Pydantic ValidationError
            TableExtractionRequest()

    def test_result_defaults(self):
        result = TableExtractionResult(success=False, error="boom")

        assert result.rows == []
        assert result.records == []


class TestHealth:
    """Test /health"""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestExtract:
    """Test /extract"""

    @patch("browser_tables.server.TableBrowser")
    def test_extract_table(self, mock_browser_cls, client, employee_table):
        browser = fake_browser(mock_browser_cls, table_locator(employee_table))

        response = client.post("/extract", json={"url": "https://example.com", "table_selector": "#people"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["headers"] == [["First name", "Last name", "Age"]]
        assert data["rows"][0] == ["Ada", "Lovelace", "36"]
        assert data["records"][2] == {"First name": "Grace", "Last name": "Hopper", "Age": "85"}
        browser.page.locator.assert_called_once_with("#people")
        browser.close.assert_awaited_once()

    @patch("browser_tables.server.TableBrowser")
    def test_extract_with_stability(self, mock_browser_cls, client, employee_table):
        fake_browser(mock_browser_cls, table_locator(employee_table))

        response = client.post("/extract", json={
            "url": "https://example.com",
            "stability": {"stability_duration": 60, "check_interval": 20, "timeout": 1000},
        })

        assert response.status_code == 200
        assert len(response.json()["records"]) == 3

    @patch("browser_tables.server.TableBrowser")
    def test_empty_table_is_unprocessable(self, mock_browser_cls, client):
        browser = fake_browser(mock_browser_cls, table_locator(FakeTable()))

        response = client.post("/extract", json={"url": "https://example.com", "timeout": 100})

        assert response.status_code == 422
        assert "No header rows found" in response.json()["detail"]
        browser.close.assert_awaited_once()

    @patch("browser_tables.server.TableBrowser")
    def test_navigation_failure(self, mock_browser_cls, client, employee_table):
        browser = fake_browser(mock_browser_cls, table_locator(employee_table), navigated=False)

        response = client.post("/extract", json={"url": "https://example.com"})

        assert response.status_code == 502
        assert "Failed to navigate" in response.json()["detail"]
        browser.close.assert_awaited_once()

    @patch("browser_tables.server.TableBrowser")
    def test_launch_failure(self, mock_browser_cls, client, employee_table):
        fake_browser(mock_browser_cls, table_locator(employee_table), launched=False)

        response = client.post("/extract", json={"url": "https://example.com"})

        assert response.status_code == 502

    def test_invalid_stability_options(self, client):
        response = client.post("/extract", json={
            "url": "https://example.com",
            "stability": {"stability_duration": 100, "check_interval": 90},
        })

        assert response.status_code == 422
