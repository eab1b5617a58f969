import pytest

from app.core.pagination import CursorPage, build_paginated_response, collect_all_pages


class FakeReader:
    """Serves integer rows whose cursor is the row itself."""

    def __init__(self, rows, fail_on_call=None):
        self.rows = rows
        self.calls = []
        self.fail_on_call = fail_on_call

    async def __call__(self, limit, start_after):
        self.calls.append((limit, start_after))
        if self.fail_on_call == len(self.calls):
            raise RuntimeError("reader unavailable")
        start = 0 if start_after is None else self.rows.index(start_after) + 1
        items = self.rows[start:start + limit]
        return CursorPage(items=items, last_cursor=items[-1] if items else None)


async def test_collects_every_page_in_order():
    reader = FakeReader(list(range(1, 8)))

    rows = await collect_all_pages(reader, page_size=3)

    assert rows == list(range(1, 8))
    assert reader.calls == [(3, None), (3, 3), (3, 6)]


async def test_exact_multiple_needs_a_final_empty_read():
    reader = FakeReader(list(range(1, 7)))

    rows = await collect_all_pages(reader, page_size=3)

    assert rows == list(range(1, 7))
    assert reader.calls[-1] == (3, 6)
    assert len(reader.calls) == 3


async def test_empty_source():
    reader = FakeReader([])
    assert await collect_all_pages(reader, page_size=5) == []
    assert reader.calls == [(5, None)]


async def test_missing_cursor_stops_the_loop():
    calls = []

    async def reader(limit, start_after):
        calls.append(start_after)
        return CursorPage(items=[1, 2], last_cursor=None)

    assert await collect_all_pages(reader, page_size=2) == [1, 2]
    assert calls == [None]


async def test_reader_failure_propagates():
    reader = FakeReader(list(range(1, 10)), fail_on_call=2)

    with pytest.raises(RuntimeError, match="reader unavailable"):
        await collect_all_pages(reader, page_size=3)


def test_build_paginated_response():
    page = build_paginated_response(["a", "b"], total=5, page=1, page_size=2)
    assert page["total_pages"] == 3
    assert page["has_more"] is True

    empty = build_paginated_response([], total=0, page=1, page_size=2)
    assert empty["total_pages"] == 0
    assert empty["has_more"] is False
