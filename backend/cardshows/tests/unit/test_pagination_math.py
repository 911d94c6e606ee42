import pytest

from cardshows.domain.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, Pagination


def test_offset_from_page_and_size():
    pagination = Pagination.from_request(page=3, page_size=10)
    assert pagination.offset == 20
    assert pagination.limit == 10


@pytest.mark.parametrize("page", [0, -4, None])
def test_invalid_page_clamps_to_first(page):
    assert Pagination.from_request(page=page, page_size=10).page == 1


@pytest.mark.parametrize("size", [0, -1, None])
def test_invalid_page_size_clamps_to_default(size):
    assert Pagination.from_request(page=1, page_size=size).page_size == DEFAULT_PAGE_SIZE


def test_page_size_is_capped():
    assert Pagination.from_request(page=1, page_size=5000).page_size == MAX_PAGE_SIZE


def test_zero_results_still_report_one_page():
    meta = Pagination.from_request(1, 20).meta(0)
    assert meta == {
        "total_count": 0,
        "page_size": 20,
        "current_page": 1,
        "total_pages": 1,
        "has_more": False,
    }


def test_total_pages_and_has_more():
    pagination = Pagination.from_request(page=2, page_size=1)
    assert pagination.total_pages(3) == 3
    assert pagination.has_more(3) is True
    assert Pagination.from_request(page=3, page_size=1).has_more(3) is False
    assert Pagination.from_request(page=1, page_size=20).total_pages(41) == 3


def test_window_slices_items():
    items = list(range(7))
    assert Pagination.from_request(2, 3).window(items) == [3, 4, 5]
    assert Pagination.from_request(4, 3).window(items) == []
