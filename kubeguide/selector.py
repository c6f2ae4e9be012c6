"""Named pages of the interface and a fuzzy-filtered picker shown on one of them."""

from __future__ import annotations

from typing import Any, Callable, Iterable

from kubeguide.fuzzy import Match, find

EXPLORER_PAGE = "explorer"

DOWN_KEYS = frozenset({"ctrl j", "tab"})
UP_KEYS = frozenset({"ctrl k", "shift tab"})
SELECT_KEYS = frozenset({"enter"})
CANCEL_KEYS = frozenset({"esc"})


class Pages:
    """Views kept under names, one of which is shown at a time."""

    def __init__(self) -> None:
        self._pages: dict[str, Any] = {}
        self._current: str | None = None

    def add_page(self, name: str, view: Any, show: bool = False) -> None:
        """Add ``view`` as ``name``, replacing any page of that name."""
        self._pages.pop(name, None)
        self._pages[name] = view
        if show:
            self._current = name

    def remove_page(self, name: str) -> None:
        """Remove a page; removing an unknown page does nothing."""
        if self._pages.pop(name, None) is None:
            return
        if self._current == name:
            self._current = next(reversed(self._pages), None)

    def switch_to(self, name: str) -> None:
        """Show the page ``name``; raises KeyError if there is none."""
        if name not in self._pages:
            raise KeyError(name)
        self._current = name

    def has_page(self, name: str) -> bool:
        return name in self._pages

    __contains__ = has_page

    def __len__(self) -> int:
        return len(self._pages)

    def view(self, name: str) -> Any:
        return self._pages[name]

    @property
    def names(self) -> list[str]:
        return list(self._pages)

    @property
    def current(self) -> str | None:
        """Name of the page shown, or None."""
        return self._current

    @property
    def current_view(self) -> Any:
        return self._pages[self._current] if self._current is not None else None


class FuzzySelector:
    """Picks one of ``items`` by fuzzy search, then returns to the explorer page."""

    def __init__(
        self,
        items: Iterable[str],
        title: str,
        page_name: str,
        pages: Pages,
        on_select: Callable[[str], None],
    ) -> None:
        self.items = list(items)
        self.title = title
        self.page_name = page_name
        self.pages = pages
        self.on_select = on_select
        self.matches: list[Match] = []
        self.selected_index = 0
        self.update("")

    def update(self, text: str) -> None:
        """Filter by ``text``; an empty text shows every item."""
        if text:
            self.matches = find(text, self.items)
        else:
            self.matches = [Match(item, index) for index, item in enumerate(self.items)]
        self.selected_index = 0

    @property
    def shown(self) -> list[str]:
        """The items currently offered, in display order."""
        return [match.text for match in self.matches]

    @property
    def selected(self) -> str | None:
        if not self.matches:
            return None
        return self.matches[self.selected_index].text

    def move_down(self) -> None:
        if self.matches:
            self.selected_index = (self.selected_index + 1) % len(self.matches)

    def move_up(self) -> None:
        if self.matches:
            self.selected_index = (self.selected_index - 1) % len(self.matches)

    def select(self) -> str | None:
        """Report the highlighted item and close; nothing happens with no matches."""
        item = self.selected
        if item is None:
            return None
        self.on_select(item)
        self._close()
        return item

    def cancel(self) -> None:
        """Close without choosing."""
        self._close()

    def handle_key(self, key: str) -> bool:
        """Act on a navigation key; return whether the key was used."""
        if key in DOWN_KEYS:
            self.move_down()
        elif key in UP_KEYS:
            self.move_up()
        elif key in SELECT_KEYS:
            self.select()
        elif key in CANCEL_KEYS:
            self.cancel()
        else:
            return False
        return True

    def _close(self) -> None:
        self.pages.remove_page(self.page_name)
        self.pages.switch_to(EXPLORER_PAGE)