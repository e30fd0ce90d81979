"""Tests for the Game model JSON conversion."""

from __future__ import annotations

import unittest

from ggdeals_sync.domain.models.game import Game, Link


class TestGame(unittest.TestCase):
    def test_round_trip_keeps_links_and_tags(self):
        game = Game(
            id="a",
            name="Portal 2",
            game_id="620",
            library_id="steam-lib",
            tags=["FPS"],
            links=[Link(name="Store", url="https://store.example/620")],
            hidden=True,
        )
        assert Game.from_dict(game.to_dict()) == game

    def test_from_dict_defaults_and_bad_links(self):
        game = Game.from_dict({"id": 42, "links": [{"name": "no url"}, "junk"]})

        assert game.id == "42"
        assert game.name == ""
        assert game.links == []
        assert game.hidden is False

    def test_from_dict_requires_id(self):
        with self.assertRaises(ValueError):
            Game.from_dict({"name": "nameless"})

    def test_has_link(self):
        game = Game(id="a", name="x", links=[Link(name="GG.deals", url="https://gg.deals/a")])
        assert game.has_link("https://gg.deals/a")
        assert not game.has_link("https://gg.deals/b")
