"""
Unit Tests for queue task encoding and the channel profile model.
"""

from datetime import datetime, timezone

import pytest

from crawler.errors import MalformedTaskError
from crawler.models import ChannelProfile, PageTask, SearchTask, sanitize_field


class TestSearchTask:

    def test_field_order_is_term_then_category(self):
        assert SearchTask(term="golang", category="tech").encode() == "golang;tech"

    def test_decode_reads_what_encode_writes(self):
        task = SearchTask(term="machine learning", category="science")
        assert SearchTask.decode(task.encode()) == task

    def test_semicolon_in_term_is_replaced_by_space(self):
        encoded = SearchTask(term="rock;roll", category="mu;sic").encode()
        assert encoded == "rock roll;mu sic"
        assert SearchTask.decode(encoded) == SearchTask(term="rock roll", category="mu sic")

    def test_decode_accepts_bytes(self):
        assert SearchTask.decode(b"cats;pets") == SearchTask(term="cats", category="pets")

    @pytest.mark.parametrize("raw", ["golang", "a;b;c", ""])
    def test_wrong_field_count_is_malformed(self, raw):
        with pytest.raises(MalformedTaskError):
            SearchTask.decode(raw)


class TestPageTask:

    def test_field_order_is_url_category_term(self):
        task = PageTask(url="https://www.youtube.com/user/x", category="tech", term="golang")
        assert task.encode() == "https://www.youtube.com/user/x;tech;golang"

    def test_decode_reads_what_encode_writes(self):
        task = PageTask(url="https://www.youtube.com/channel/UC123", category="tech", term="golang")
        assert PageTask.decode(task.encode()) == task

    def test_semicolon_in_url_is_percent_encoded(self):
        encoded = PageTask(url="https://x.test/a;b", category="c", term="t").encode()
        assert PageTask.decode(encoded).url == "https://x.test/a%3Bb"

    def test_two_fields_is_malformed(self):
        with pytest.raises(MalformedTaskError):
            PageTask.decode("https://www.youtube.com/user/x;tech")

    def test_malformed_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            PageTask.decode("nope")


def test_sanitize_field_handles_none():
    assert sanitize_field(None) == ""


class TestChannelProfile:

    def _profile(self, **kwargs):
        data = dict(
            url="https://www.youtube.com/user/x",
            category="tech",
            name="X",
            subscriber_count=5000,
            description="desc",
            image_url="https://img.test/x.jpg",
            term="golang",
            discovered_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        )
        data.update(kwargs)
        return ChannelProfile(**data)

    def test_identity_is_url_and_category(self):
        assert self._profile().identity == ("https://www.youtube.com/user/x", "tech")

    def test_document_field_names(self):
        doc = self._profile().to_document()
        assert set(doc) == {"name", "url", "subscribers", "description", "image", "created", "term", "category"}
        assert doc["subscribers"] == 5000
        assert doc["image"] == "https://img.test/x.jpg"

    def test_document_clamps_subscribers_to_signed_64bit(self):
        doc = self._profile(subscriber_count=2 ** 64 - 1).to_document()
        assert doc["subscribers"] == 2 ** 63 - 1

    def test_from_document_restores_profile(self):
        profile = self._profile()
        assert ChannelProfile.from_document(profile.to_document()) == profile
