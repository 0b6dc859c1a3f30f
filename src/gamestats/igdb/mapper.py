"""Decode IGDB relation IDs into names using the bundled tables."""

from typing import Any, Iterable, Optional

from gamestats.data.igdb_names import IGDB_NAMES


class IdNameMapper:
    """
    Last-resort decoder for IGDB IDs.

    Unknown IDs become "Unknown <kind> ID: <id>" instead of being dropped,
    so list lengths still line up with counts computed elsewhere.
    """

    def __init__(self, tables: Optional[dict[str, tuple[str, dict[int, str]]]] = None) -> None:
        self._tables = tables if tables is not None else IGDB_NAMES

    def name_for(self, category: str, igdb_id: int) -> str:
        """Name of a single ID within a category."""
        label, table = self._tables.get(category, (category.rstrip("s"), {}))
        return table.get(int(igdb_id)) or f"Unknown {label} ID: {igdb_id}"

    def names_for(self, category: str, ids: Iterable[int]) -> list[str]:
        """Names for a sequence of IDs, preserving order."""
        return [self.name_for(category, i) for i in ids]

    def decode(self, category: str, items: Any) -> list[str]:
        """
        Flatten one relation of an IGDB game into names.

        Items may be expanded objects ({"id": 5, "name": "Shooter"}), objects
        without a name, or bare integer IDs. Anything else is skipped.
        """
        if not isinstance(items, list):
            return []

        names: list[str] = []
        for item in items:
            if isinstance(item, dict):
                name = item.get("name")
                if isinstance(name, str) and name.strip():
                    names.append(name.strip())
                elif isinstance(item.get("id"), int):
                    names.append(self.name_for(category, item["id"]))
            elif isinstance(item, int) and not isinstance(item, bool):
                names.append(self.name_for(category, item))
        return names
