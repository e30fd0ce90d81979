"""Game domain model.

A ``Game`` is one entry of the local library as the host exposes it. The sync
pipeline reads it, and writes back only status tags and links.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

GameId = str


@dataclass(frozen=True)
class Link:
    name: str
    url: str


@dataclass
class Game:
    """Library entry submitted to the GG.deals collection."""

    id: GameId
    name: str
    game_id: str | None = None
    library_id: str | None = None
    tags: list[str] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    hidden: bool = False

    def has_link(self, url: str) -> bool:
        return any(link.url == url for link in self.links)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "game_id": self.game_id,
            "library_id": self.library_id,
            "tags": list(self.tags),
            "links": [{"name": link.name, "url": link.url} for link in self.links],
            "hidden": self.hidden,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Game:
        """Build a game from its JSON form.

        Raises:
            ValueError: If the entry has no id.
        """
        game_id = data.get("id")
        if not game_id:
            msg = "Game entry is missing an id"
            raise ValueError(msg)
        links = [
            Link(name=str(link.get("name") or ""), url=str(link["url"]))
            for link in data.get("links") or []
            if isinstance(link, dict) and link.get("url")
        ]
        return cls(
            id=str(game_id),
            name=str(data.get("name") or ""),
            game_id=data.get("game_id"),
            library_id=data.get("library_id"),
            tags=[str(tag) for tag in data.get("tags") or []],
            links=links,
            hidden=bool(data.get("hidden", False)),
        )
