"""
Pytest configuration and shared fixtures
"""

import pytest

from tests.fakes import FakeTable, table_locator, td, th


@pytest.fixture
def employee_table():
    """Plain three-column table"""
    return FakeTable(
        header_rows=[[th("First name"), th("Last name"), th("Age")]],
        body_rows=[
            [td("Ada"), td("Lovelace"), td("36")],
            [td("Alan"), td("Turing"), td("41")],
            [td("Grace"), td("Hopper"), td("85")],
        ],
    )


@pytest.fixture
def employee_locator(employee_table):
    return table_locator(employee_table)


@pytest.fixture
def grouped_header_table():
    """Two header rows: a grouping row with spans, then the leaf names"""
    return FakeTable(
        header_rows=[
            [th("Name", rowspan=2), th("Contact", colspan=2), th("Age", rowspan=2)],
            [th("Email"), th("Phone")],
        ],
        body_rows=[
            [td("Ada"), td("ada@example.com"), td("555-0100"), td("36")],
            [td("Alan"), td("alan@example.com"), td("555-0101"), td("41")],
        ],
    )
