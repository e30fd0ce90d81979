"""Tests for applying GG.deals outcomes to library games."""

from __future__ import annotations

import unittest
from unittest.mock import MagicMock

from ggdeals_sync.adapters.ggdeals.models import AddToCollectionResult
from ggdeals_sync.adapters.ggdeals.sync.constants import (
    LINK_NAME,
    TAG_IGNORED,
    TAG_NOT_FOUND,
    TAG_SYNCED,
)
from ggdeals_sync.adapters.ggdeals.sync.game_status import GameStatusService
from ggdeals_sync.adapters.ggdeals.sync.links import AddLinkService
from ggdeals_sync.adapters.ggdeals.sync.result_processor import AddResultProcessor
from tests.conftest import FakeLibrary, make_game, make_settings, result

URL = "https://gg.deals/game/portal-2/"


def _make_processor(add_links: bool = False):
    status = MagicMock(spec=GameStatusService)
    links = MagicMock(spec=AddLinkService)
    processor = AddResultProcessor(make_settings(add_links_to_games=add_links), status, links)
    return processor, status, links


class TestStatusUpdates(unittest.TestCase):
    """Status is updated once for remote decisions and never for errors or skips."""

    def test_status_matrix(self):
        expected_calls = {
            AddToCollectionResult.ADDED: 1,
            AddToCollectionResult.SYNCED: 1,
            AddToCollectionResult.NOT_FOUND: 1,
            AddToCollectionResult.IGNORED: 1,
            AddToCollectionResult.ERROR: 0,
            AddToCollectionResult.SKIPPED_DUE_TO_LIBRARY: 0,
        }
        for outcome, calls in expected_calls.items():
            with self.subTest(outcome=outcome):
                processor, status, _ = _make_processor()
                game = make_game("g1")

                processor.process([game], {"g1": result(outcome)})

                assert status.update_status.call_count == calls
                if calls:
                    status.update_status.assert_called_once_with(game, outcome)

    def test_game_without_result_is_untouched(self):
        processor, status, links = _make_processor(add_links=True)

        processor.process([make_game("g1")], {})

        status.update_status.assert_not_called()
        links.add_link.assert_not_called()


class TestLinkAttachment(unittest.TestCase):
    """A link is attached only when the flag is on and the url is non-empty."""

    def test_link_matrix(self):
        cases = [
            (True, URL, 1),
            (True, None, 0),
            (True, "", 0),
            (False, URL, 0),
            (False, None, 0),
        ]
        for add_links, url, calls in cases:
            with self.subTest(add_links=add_links, url=url):
                processor, _, links = _make_processor(add_links=add_links)
                game = make_game("g1")

                processor.process([game], {"g1": result(AddToCollectionResult.ADDED, url=url)})

                assert links.add_link.call_count == calls
                if calls:
                    links.add_link.assert_called_once_with(game, URL)

    def test_error_outcome_never_links(self):
        processor, _, links = _make_processor(add_links=True)

        processor.process(
            [make_game("g1")], {"g1": result(AddToCollectionResult.ERROR, url=URL)}
        )

        links.add_link.assert_not_called()


class TestWithRealCollaborators(unittest.TestCase):
    def test_tags_and_links_written_to_library(self):
        games = [make_game("a"), make_game("b"), make_game("c"), make_game("d")]
        library = FakeLibrary(games)
        processor = AddResultProcessor(
            make_settings(add_links_to_games=True),
            GameStatusService(library),
            AddLinkService(library),
        )

        processor.process(
            games,
            {
                "a": result(AddToCollectionResult.ADDED, url=URL),
                "b": result(AddToCollectionResult.NOT_FOUND),
                "c": result(AddToCollectionResult.IGNORED),
                "d": result(AddToCollectionResult.ERROR, message="boom"),
            },
        )

        assert library.games["a"].tags == [TAG_SYNCED]
        assert [(link.name, link.url) for link in library.games["a"].links] == [(LINK_NAME, URL)]
        assert library.games["b"].tags == [TAG_NOT_FOUND]
        assert library.games["c"].tags == [TAG_IGNORED]
        assert library.games["d"].tags == []

    def test_processing_twice_is_idempotent(self):
        game = make_game("a")
        library = FakeLibrary([game])
        processor = AddResultProcessor(
            make_settings(add_links_to_games=True),
            GameStatusService(library),
            AddLinkService(library),
        )
        results = {"a": result(AddToCollectionResult.ADDED, url=URL)}

        processor.process([game], results)
        updates_after_first = len(library.updates)
        processor.process([game], results)

        assert len(library.updates) == updates_after_first
        assert game.tags == [TAG_SYNCED]
        assert len(game.links) == 1


class TestGameStatusService(unittest.TestCase):
    def test_replaces_previous_status_tag_and_keeps_others(self):
        game = make_game("a", tags=["RPG", TAG_NOT_FOUND])
        library = FakeLibrary([game])
        service = GameStatusService(library)

        service.update_status(game, AddToCollectionResult.SYNCED)

        assert game.tags == ["RPG", TAG_SYNCED]
        assert service.get_status(game) is AddToCollectionResult.SYNCED
        assert library.updates == ["a"]

    def test_rejects_outcomes_without_status(self):
        service = GameStatusService(FakeLibrary())
        with self.assertRaises(ValueError):
            service.update_status(make_game("a"), AddToCollectionResult.ERROR)

    def test_unknown_game_has_no_status(self):
        assert GameStatusService(FakeLibrary()).get_status(make_game("a", tags=["RPG"])) is None


class ReadOnlyLibrary(FakeLibrary):
    def update_game(self, game):
        raise OSError("library is read-only")


class TestFailedLibraryWrite(unittest.TestCase):
    """A game keeps its tags and links when the library rejects the write."""

    def test_status_not_changed_when_write_fails(self):
        game = make_game("a", tags=["RPG", TAG_NOT_FOUND])
        service = GameStatusService(ReadOnlyLibrary([game]))

        with self.assertRaises(OSError):
            service.update_status(game, AddToCollectionResult.SYNCED)

        assert game.tags == ["RPG", TAG_NOT_FOUND]

    def test_link_not_added_when_write_fails(self):
        game = make_game("a")
        service = AddLinkService(ReadOnlyLibrary([game]))

        with self.assertRaises(OSError):
            service.add_link(game, URL)

        assert game.links == []
        assert not game.has_link(URL)
