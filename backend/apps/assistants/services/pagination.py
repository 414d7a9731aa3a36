from __future__ import annotations

from typing import Any, Iterator


def drain_holding_last(page: Any) -> Iterator[Any]:
    """
    Yield every item of a cursor-paginated OpenAI listing, page by page.

    Meant for delete-while-listing loops. The next page is requested with the
    current page's last item as its ``after`` cursor, so that item is held
    back until the next page has been fetched and only then yielded. On the
    final page it is yielded once ``has_next_page()`` reports nothing more.
    """
    while page.data:
        *leading, last = page.data
        yield from leading

        if not page.has_next_page():
            yield last
            return

        page = page.get_next_page()
        yield last
