import copy


class ReportHistory:
    """Most-recent-first list of generated reports, kept for the browser session only."""

    def __init__(self):
        self._items: list[dict] = []

    def add(self, report: dict) -> dict:
        # Snapshot so later edits to the form (or the caller's dict) never leak into history.
        entry = copy.deepcopy(report)
        self._items.insert(0, entry)
        return entry

    def select(self, report_id: str) -> dict | None:
        for item in self._items:
            if item.get("id") == report_id:
                return item
        return None

    @property
    def items(self) -> list[dict]:
        return list(self._items)

    @property
    def latest(self) -> dict | None:
        return self._items[0] if self._items else None

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
