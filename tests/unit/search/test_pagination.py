"""Unit tests for the pagination overlay."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from redis_text_search.search.pagination import Pager, SearchPage, paginate


pytestmark = pytest.mark.unit

IDS = [str(n) for n in range(1, 8)]


def test_second_page_of_seven():
    finder = Mock(side_effect=lambda ids, options: [f"record-{i}" for i in ids])

    page = paginate(IDS, finder, page=2, per_page=3)

    finder.assert_called_once_with(["4", "5", "6"], {"window": {"offset": 3, "limit": 3}})
    assert page.items == ["record-4", "record-5", "record-6"]
    assert page.offset == 3
    assert page.total == 7
    assert page.page == 2
    assert page.per_page == 3
    assert page.total_pages == 3
    assert page.previous_page == 1
    assert page.next_page == 3


def test_last_page_is_partial():
    finder = Mock(return_value=["record-7"])

    page = paginate(IDS, finder, page=3, per_page=3)

    finder.assert_called_once_with(["7"], {"window": {"offset": 6, "limit": 3}})
    assert page.next_page is None
    assert list(page) == ["record-7"]
    assert len(page) == 1


def test_options_pass_through_to_finder():
    finder = Mock(return_value=[])

    paginate(IDS, finder, page=1, per_page=2, options={"order": "title"})

    finder.assert_called_once_with(["1", "2"], {"order": "title", "window": {"offset": 0, "limit": 2}})


def test_empty_candidates_skip_finder():
    finder = Mock()

    page = paginate([], finder, page=1, per_page=10)

    finder.assert_not_called()
    assert isinstance(page, SearchPage)
    assert page.items == []
    assert page.total == 0
    assert page.total_pages == 0


def test_page_past_the_end_skips_finder():
    finder = Mock()

    page = paginate(IDS, finder, page=9, per_page=3)

    finder.assert_not_called()
    assert page.out_of_bounds
    assert page.total == 7


@pytest.mark.parametrize(("page", "per_page", "expected"), [(0, 3, (1, 3)), (-2, 0, (1, 1)), (None, 5, (1, 5))])
def test_pager_clamps_invalid_values(page, per_page, expected):
    pager = Pager.create(page, per_page, total=7)

    assert (pager.page, pager.per_page) == expected
    assert pager.offset == 0
