"""Multi-select state for list views."""

from typing import Iterable, Iterator


class Selection:
    """Ordered set of selected item ids.

    ``toggle_all`` follows the checkbox header: when every visible id is
    already selected it deselects everything, otherwise it selects exactly the
    visible ids.
    """

    def __init__(self, ids: Iterable[str] = ()):
        self._ids: list[str] = []
        for item_id in ids:
            self.select(item_id)

    def select(self, item_id: str) -> None:
        item_id = str(item_id)
        if item_id not in self._ids:
            self._ids.append(item_id)

    def deselect(self, item_id: str) -> None:
        item_id = str(item_id)
        if item_id in self._ids:
            self._ids.remove(item_id)

    def toggle(self, item_id: str) -> bool:
        """Flip one id; returns True if it is now selected."""
        item_id = str(item_id)
        if item_id in self._ids:
            self._ids.remove(item_id)
            return False
        self._ids.append(item_id)
        return True

    def toggle_all(self, visible_ids: Iterable[str]) -> None:
        visible = [str(i) for i in visible_ids]
        if visible and len(self._ids) == len(visible) and set(self._ids) == set(visible):
            self._ids = []
        else:
            self._ids = visible

    def clear(self) -> None:
        self._ids = []

    def is_selected(self, item_id: str) -> bool:
        return str(item_id) in self._ids

    def __contains__(self, item_id: object) -> bool:
        return str(item_id) in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)
