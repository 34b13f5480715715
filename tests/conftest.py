"""Shared test doubles: an in-memory HTTP session serving canned pages."""

from __future__ import annotations

NOT_FOUND_HTML = "<html><head><title>Not found</title></head><body>Not found</body></html>"


class FakeResponse:
    def __init__(self, url: str, text: str = "", status_code: int = 200, content_type: str = "text/html; charset=utf-8"):
        self.url = url
        self.text = text
        self.status_code = status_code
        self.headers = {"Content-Type": content_type}


class FakeSession:
    """Serves ``routes``: url -> html string, FakeResponse, or exception to raise.

    Unknown URLs answer 404. Every requested URL is recorded in ``calls``.
    """

    def __init__(self, routes: dict | None = None):
        self.routes = dict(routes or {})
        self.calls: list[str] = []
        self.headers: dict[str, str] = {}

    def get(self, url, headers=None, timeout=None):
        self.calls.append(url)
        target = self.routes.get(url)
        if target is None:
            return FakeResponse(url, NOT_FOUND_HTML, status_code=404)
        if isinstance(target, BaseException):
            raise target
        if isinstance(target, FakeResponse):
            return target
        if isinstance(target, tuple):
            text, content_type = target
            return FakeResponse(url, text, content_type=content_type)
        return FakeResponse(url, target)


def page_html(title: str = "", body: str = "", head: str = "") -> str:
    title_tag = f"<title>{title}</title>" if title else ""
    return f"<html><head>{title_tag}{head}</head><body>{body}</body></html>"
