"""Single-page view that shows the backend greeting.

`MessageView` keeps one piece of local state, the message string. `mount`
fetches it once; `render` turns the current state into page markup.
"""

import html
import logging

import httpx

logger = logging.getLogger(__name__)

PAGE_TEMPLATE = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{title}</title>
  </head>
  <body>
    <div id="root">
      <h1>Production Code</h1>
      <h2 class="mt-4">Data from backend: {message}</h2>
    </div>
  </body>
</html>
"""


class MessageView:
    """Fetch-once component backed by an injected `httpx.AsyncClient`.

    The client's `base_url` decides where a relative `path` lands: the
    frontend's own origin when going through the dev proxy, or the API
    origin when the backend sends CORS headers.
    """

    def __init__(self, client: httpx.AsyncClient, path: str = "/api/message", title: str = "Message Client"):
        self.client = client
        self.path = path
        self.title = title
        self.message = ""

    @property
    def url(self) -> str:
        return str(self.client.base_url.join(self.path))

    async def mount(self) -> None:
        """Issue one GET and store the `message` field; log a single line on failure."""
        try:
            response = await self.client.get(self.path)
            data = response.json()
            self.message = data["message"]
        except (httpx.HTTPError, ValueError, KeyError, TypeError):
            logger.info("Error fetching the data from %s", self.url)

    def render(self) -> str:
        return PAGE_TEMPLATE.format(
            title=html.escape(self.title),
            message=html.escape("" if self.message is None else str(self.message)),
        )
