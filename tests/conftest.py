"""Shared fixtures for variant engine tests."""

import pytest

from variant_engine.catalog.attributes import AttributeCatalog, AttributeType
from variant_engine.domain.models import AttributeLine, AttributeValue, ProductData


@pytest.fixture
def catalog() -> AttributeCatalog:
    """Catalog built from the embedded attribute snapshot."""
    return AttributeCatalog.default()


@pytest.fixture
def shirt() -> ProductData:
    """Base product with a plain letter code."""
    return ProductData(id=10, name="Shirt", default_code="NTEST", list_price=150000)


@pytest.fixture
def jeans() -> ProductData:
    """Base product varied by color and number size."""
    return ProductData(id=497, name="Quần Jean", default_code="N497", list_price=320000)


@pytest.fixture
def size_line() -> AttributeLine:
    """Text-size line with S and M."""
    return AttributeLine(
        attribute_id=1,
        attribute_name="Size Chữ",
        values=(
            AttributeValue(id=1, name="S", code="S"),
            AttributeValue(id=2, name="M", code="M"),
        ),
    )


@pytest.fixture
def color_line(catalog: AttributeCatalog) -> AttributeLine:
    """Color line with Đen and Đỏ, in that order."""
    line, _ = catalog.line_for(AttributeType.COLOR, ["Đen", "Đỏ"])
    return line


@pytest.fixture
def number_line(catalog: AttributeCatalog) -> AttributeLine:
    """Number-size line with 28 and 30."""
    line, _ = catalog.line_for(AttributeType.NUMBER_SIZE, ["28", "30"])
    return line
