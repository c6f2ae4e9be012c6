"""Screens of the terminal interface: welcome, explorer list, details and pickers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

import urwid

from kubeguide.selector import FuzzySelector, Pages

PALETTE = [
    ("body", "white", "black"),
    ("selected", "black", "light blue"),
    ("label", "light blue", "black"),
]

DEFAULT_WELCOME_MESSAGE = (
    "Welcome to kubebuide!\n\nPress e to explore\n\nPress q to quit\n\nPress esc to go back"
)

RESOURCE_TYPES = (
    "all", "pods", "services", "deployments", "configmaps", "secrets",
    "ingresses", "daemonsets", "statefulsets", "jobs", "cronjobs",
)

RESOURCE_SELECTOR_TITLE = " Resource Type Selector (Ctrl+J/K to navigate, Enter to select, Esc to cancel) "
NAMESPACE_SELECTOR_TITLE = " Namespace Selector (Ctrl+J/K to navigate, Enter to select, Esc to cancel) "
RESOURCE_SELECTOR_PAGE = "resource-selector"
NAMESPACE_SELECTOR_PAGE = "namespace-selector"


def explorer_title(namespace: str, resource_type: str) -> str:
    """Title of the explorer list for the given namespace and resource filter."""
    return (
        f" Explorer Mode - Namespace: {namespace} | Resource: {resource_type} "
        "(Press 'n'/'r' to change) "
    )


def _entry(markup) -> urwid.Widget:
    return urwid.AttrMap(urwid.SelectableIcon(markup), "body", focus_map="selected")


class Welcome:
    """The start screen."""

    def __init__(self, title: str = "Welcome", message: str = "") -> None:
        self.title = title
        self.message = message or DEFAULT_WELCOME_MESSAGE

    def create_view(self) -> urwid.Widget:
        text = urwid.Text(self.message, align="center")
        box = urwid.LineBox(urwid.Filler(text, valign="top"), title=self.title)
        centred = urwid.Padding(urwid.BoxAdapter(box, 10), align="center", width=40)
        return urwid.Filler(centred, valign="middle")


@dataclass(frozen=True)
class ResourceDetails:
    """The YAML of one resource."""

    name: str
    resource_type: str
    content: str

    def title(self) -> str:
        return f" {self.resource_type}: {self.name} (Press Esc to return) "

    def create_view(self) -> urwid.Widget:
        lines = self.content.splitlines() or [""]
        body = urwid.ListBox(urwid.SimpleListWalker([urwid.Text(line) for line in lines]))
        return urwid.LineBox(body, title=self.title().strip())


class _ExplorerListBox(urwid.ListBox):
    def __init__(self, walker, move: Callable[[int], None], activate: Callable[[], object]) -> None:
        super().__init__(walker)
        self._move = move
        self._activate = activate

    def keypress(self, size, key):
        if key in ("j", "tab"):
            self._move(1)
        elif key in ("k", "shift tab"):
            self._move(-1)
        elif key == "enter":
            self._activate()
        else:
            return super().keypress(size, key)
        return None


class ExplorerList:
    """Bordered list of resources; ``on_select`` gets the main and secondary text."""

    def __init__(
        self, title: str, on_select: Callable[[str, str], None] | None = None
    ) -> None:
        self.on_select = on_select
        self._entries: list[tuple[str, str]] = []
        self._walker = urwid.SimpleFocusListWalker([])
        self._listbox = _ExplorerListBox(self._walker, self.move, self.activate)
        self._title = title
        self._frame = urwid.LineBox(self._listbox, title=title.strip())

    @property
    def widget(self) -> urwid.Widget:
        return self._frame

    @property
    def title(self) -> str:
        return self._title

    def set_title(self, title: str) -> None:
        self._title = title
        self._frame.set_title(title.strip())

    @property
    def entries(self) -> list[tuple[str, str]]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self._walker[:] = []

    def add_item(self, main: str, secondary: str = "") -> None:
        self._entries.append((main, secondary))
        self._walker.append(_entry(f"{main}\n  {secondary}" if secondary else main))

    @property
    def focus_index(self) -> int | None:
        if not self._entries:
            return None
        return self._listbox.focus_position

    def move(self, step: int) -> None:
        """Move the highlight by ``step`` entries, wrapping around."""
        if self._entries:
            self._listbox.focus_position = (self._listbox.focus_position + step) % len(self._entries)

    def activate(self) -> tuple[str, str] | None:
        """Report the highlighted entry to ``on_select`` and return it."""
        index = self.focus_index
        if index is None:
            return None
        entry = self._entries[index]
        if self.on_select is not None:
            self.on_select(*entry)
        return entry


class _SearchEdit(urwid.Edit):
    def __init__(self, selector: FuzzySelector, refresh: Callable[[], None]) -> None:
        super().__init__(caption=("label", "Search: "))
        self._selector = selector
        self._refresh = refresh

    def keypress(self, size, key):
        if self._selector.handle_key(key):
            self._refresh()
            return None
        return super().keypress(size, key)


def _selector_view(selector: FuzzySelector) -> urwid.Widget:
    walker = urwid.SimpleFocusListWalker([])
    listbox = urwid.ListBox(walker)

    def refresh() -> None:
        walker[:] = [_entry(text) for text in selector.shown]
        if walker:
            listbox.focus_position = selector.selected_index

    def on_change(_widget, text: str) -> None:
        selector.update(text)
        refresh()

    edit = _SearchEdit(selector, refresh)
    urwid.connect_signal(edit, "change", on_change)
    refresh()
    pile = urwid.Pile([("pack", edit), listbox], focus_item=0)
    return urwid.LineBox(pile, title=selector.title.strip())


class Explorer:
    """Builds the explorer list and the pickers that change what it shows."""

    def create_explorer_view(
        self,
        namespace: str,
        resource_type: str,
        on_select: Callable[[str, str], None] | None = None,
    ) -> ExplorerList:
        return ExplorerList(explorer_title(namespace, resource_type), on_select)

    def update_explorer_title(self, view: ExplorerList, namespace: str, resource_type: str) -> None:
        view.set_title(explorer_title(namespace, resource_type))

    def create_resource_selector(
        self, pages: Pages, on_select: Callable[[str], None]
    ) -> FuzzySelector:
        """Show a picker of resource types."""
        return self._open(RESOURCE_TYPES, RESOURCE_SELECTOR_TITLE, RESOURCE_SELECTOR_PAGE, pages, on_select)

    def create_namespace_selector(
        self, namespaces: Iterable[str], pages: Pages, on_select: Callable[[str], None]
    ) -> FuzzySelector:
        """Show a picker of namespaces."""
        return self._open(namespaces, NAMESPACE_SELECTOR_TITLE, NAMESPACE_SELECTOR_PAGE, pages, on_select)

    @staticmethod
    def _open(
        items: Iterable[str],
        title: str,
        page_name: str,
        pages: Pages,
        on_select: Callable[[str], None],
    ) -> FuzzySelector:
        selector = FuzzySelector(items, title, page_name, pages, on_select)
        pages.add_page(page_name, _selector_view(selector))
        pages.switch_to(page_name)
        return selector