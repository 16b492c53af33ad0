"""
Unit Tests for the document fetcher (HTTP session mocked).
"""

import threading
from unittest.mock import MagicMock, patch

import pytest
import requests
from bs4 import BeautifulSoup

from crawler.errors import FetchError
from crawler.fetcher import DocumentFetcher, query_all, query_first, query_first_attr


def _session(text="<html></html>", status_error=None, get_error=None):
    session = MagicMock(spec=requests.Session)
    response = MagicMock()
    response.text = text
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    if get_error is not None:
        session.get.side_effect = get_error
    else:
        session.get.return_value = response
    return session


class TestDocumentFetcher:

    def test_fetch_parses_html(self):
        session = _session("<html><p class='x'>hi</p></html>")
        fetcher = DocumentFetcher(timeout=7, session=session)

        doc = fetcher.fetch("https://www.youtube.com/user/x/about")

        assert query_first(doc, ".x") == "hi"
        _, kwargs = session.get.call_args
        assert kwargs["timeout"] == 7.0
        assert "User-Agent" in kwargs["headers"]

    def test_http_error_becomes_fetch_error(self):
        session = _session(status_error=requests.HTTPError("404 Client Error"))
        fetcher = DocumentFetcher(session=session)

        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch("https://www.youtube.com/user/missing/about")

        assert exc_info.value.url == "https://www.youtube.com/user/missing/about"
        assert "404" in exc_info.value.reason

    def test_connection_error_becomes_fetch_error(self):
        session = _session(get_error=requests.ConnectionError("refused"))
        with pytest.raises(FetchError):
            DocumentFetcher(session=session).fetch("https://www.youtube.com/channels?q=x&page=1")

    def test_close_closes_session(self):
        session = _session()
        DocumentFetcher(session=session).close()
        session.close.assert_called_once()

    def test_each_thread_gets_its_own_session(self):
        created = [_session("<html><p>a</p></html>"), _session("<html><p>b</p></html>")]

        fetcher = DocumentFetcher()
        with patch("crawler.fetcher.requests.Session", side_effect=list(created)) as factory:
            fetcher.fetch("https://www.youtube.com/user/a/about")
            fetcher.fetch("https://www.youtube.com/user/b/about")
            worker = threading.Thread(target=fetcher.fetch, args=("https://www.youtube.com/user/c/about",))
            worker.start()
            worker.join(5)

        assert factory.call_count == 2
        assert created[0].get.call_count == 2
        assert created[1].get.call_count == 1

        fetcher.close()
        for s in created:
            s.close.assert_called_once()


class TestQueries:

    doc = BeautifulSoup(
        "<div><a class='l' href='/a' rel='me nofollow'>A</a><a class='l' href='/b'>B</a></div>",
        "html.parser",
    )

    def test_query_first(self):
        assert query_first(self.doc, ".l") == "A"
        assert query_first(self.doc, ".missing") is None

    def test_query_first_attr_uses_requested_attribute(self):
        assert query_first_attr(self.doc, ".l", "href") == "/a"
        assert query_first_attr(self.doc, ".l", "rel") == "me nofollow"
        assert query_first_attr(self.doc, ".l", "title") is None

    def test_query_all(self):
        assert [n.get("href") for n in query_all(self.doc, ".l")] == ["/a", "/b"]
