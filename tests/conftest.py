"""Configure test paths and a fake Dcard API / storage backend."""
import sys
from pathlib import Path

import httpx
import orjson
import pytest

# Add src/ to path so tests can import the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

BACKEND_URL = "http://backend.test"
ARTICLE_URL = "https://www.dcard.tw/f/talk/p/255001234"


def make_page(
    title="Test Article Title",
    created_at="2024-01-15T10:30:00.000Z",
    content="First paragraph.",
    url=ARTICLE_URL,
):
    """Build a minimal Dcard article page; pass None to drop a field."""
    head = f'<link rel="canonical" href="{url}">' if url is not None else ""
    h1 = f"<h1>{title}</h1>" if title is not None else ""
    time = f'<time datetime="{created_at}">Jan 15</time>' if created_at is not None else ""
    body = (
        f'<div class="d_ma_2n d_gr0vis_23 c1golu5u">{content}</div>'
        if content is not None else ""
    )
    return f"""
<html>
<head>{head}</head>
<body>
<article>
  {h1}
  {time}
  {body}
</article>
</body>
</html>
"""


def make_item(item_id, sub_comments=0, **extra):
    """Build one comments/replies API item."""
    item = {
        "id": item_id,
        "content": f"content of {item_id}",
        "withNickname": False,
        "school": "NTU",
        "department": "CS",
        "gender": "M",
        "likeCount": 3,
        "createdAt": "2024-01-15T11:00:00.000Z",
        "subCommentCount": sub_comments,
    }
    item.update(extra)
    return item


class FakeServer:
    """
    In-memory stand-in for the Dcard API and the storage backend.

    Attributes:
        comment_pages: Responses for successive comment page requests. Each
            entry is a dict (served as JSON), an int status code, or an
            exception instance to raise. The last entry repeats.
        replies: Reply items keyed by parent comment id
        backend_status: Status code returned for every backend POST
    """

    def __init__(self):
        self.comment_pages = []
        self.replies = {}
        self.reply_status = 200
        self.backend_status = 201
        self.requests = []
        self.posts = []
        self._page_index = 0

    @property
    def comment_requests(self):
        return [r for r in self.requests if "/commentRanking/" in r.url.path]

    @property
    def reply_requests(self):
        return [r for r in self.requests if "parentId" in r.url.params]

    def posted_paths(self):
        return [r.url.path for r, _ in self.posts]

    def _comment_page(self, request):
        index = min(self._page_index, len(self.comment_pages) - 1)
        self._page_index += 1
        page = self.comment_pages[index]
        if isinstance(page, Exception):
            raise page
        if isinstance(page, int):
            return httpx.Response(page)
        return httpx.Response(200, json=page)

    def handler(self, request):
        if request.url.host == "www.dcard.tw":
            self.requests.append(request)
            if "/commentRanking/" in request.url.path:
                return self._comment_page(request)
            parent_id = request.url.params.get("parentId")
            if self.reply_status != 200:
                return httpx.Response(self.reply_status)
            return httpx.Response(200, json=self.replies.get(parent_id, []))

        self.posts.append((request, orjson.loads(request.content)))
        return httpx.Response(self.backend_status)

    def client(self):
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def server():
    return FakeServer()
