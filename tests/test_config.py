import pytest
from pydantic import ValidationError

from app.core.config import Config, config
from app.core.pagination import MAX_CURSOR_PAGE_SIZE
from app.modules.orders.schemas import OrderListOptions
from app.modules.products.schemas import ProductListOptions


def test_dashboard_page_size_defaults_to_200():
    assert Config().dashboard_page_size == 200


@pytest.mark.parametrize("value", ["0", str(MAX_CURSOR_PAGE_SIZE + 1), "2000"])
def test_out_of_range_dashboard_page_size_fails_at_startup(monkeypatch, value):
    monkeypatch.setenv("DASHBOARD_PAGE_SIZE", value)
    with pytest.raises(ValidationError):
        Config()


def test_largest_allowed_page_size_is_accepted_by_both_readers(monkeypatch):
    monkeypatch.setenv("DASHBOARD_PAGE_SIZE", str(MAX_CURSOR_PAGE_SIZE))
    page_size = Config().dashboard_page_size

    assert OrderListOptions(limit=page_size).limit == MAX_CURSOR_PAGE_SIZE
    assert ProductListOptions(limit=page_size).limit == MAX_CURSOR_PAGE_SIZE


def test_runtime_assignment_is_validated():
    with pytest.raises(ValidationError):
        config.dashboard_page_size = 2000
    assert config.dashboard_page_size == 200


def test_negative_dashboard_limits_are_rejected(monkeypatch):
    monkeypatch.setenv("RECENT_ORDERS_LIMIT", "-1")
    with pytest.raises(ValidationError):
        Config()
