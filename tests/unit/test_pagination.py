"""
Unit Tests - Pagination Envelope
"""
from bloghub.serving.api.pagination import page_offset, paginate, total_pages


class TestPageMath:
    """Tests for offset and page count helpers"""

    def test_offset_is_one_indexed(self):
        assert page_offset(1, 20) == 0
        assert page_offset(3, 20) == 40

    def test_total_pages_rounds_up(self):
        assert total_pages(41, 20) == 3
        assert total_pages(40, 20) == 2

    def test_empty_total(self):
        assert total_pages(0, 20) == 0


class TestPaginate:
    """Tests for the response envelope"""

    def test_envelope_uses_camel_case(self):
        page = paginate(["a", "b"], page=2, limit=2, total=5)

        assert page.model_dump(by_alias=True) == {
            "data": ["a", "b"],
            "pagination": {"page": 2, "limit": 2, "total": 5, "totalPages": 3},
        }

    def test_page_past_the_end_is_empty(self):
        page = paginate([], page=9, limit=10, total=12)

        assert page.data == []
        assert page.pagination.page == 9
        assert page.pagination.total_pages == 2
