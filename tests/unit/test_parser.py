"""
Unit tests for playlist parsing.
"""

import pytest

from m3usieve.config import PlaylistConfig
from m3usieve.playlist.parser import parse
from m3usieve.protocols import ResourceEntry


@pytest.mark.unit
class TestParse:
    def test_pairs_metadata_with_following_resource(self, alpha_beta_playlist):
        document = parse(alpha_beta_playlist)

        assert document.entries == (
            ResourceEntry("http://a.test/x", 2, "#EXTINF:-1,Alpha", 1),
            ResourceEntry("http://b.test/y", 4, "#EXTINF:-1,Beta", 3),
        )
        assert document.total_count == 2

    def test_lines_are_kept_unchanged(self, alpha_beta_playlist):
        document = parse(alpha_beta_playlist)

        assert document.lines == tuple(alpha_beta_playlist.split("\n"))
        assert document.lines[-1] == ""

    def test_bare_resource_has_no_metadata(self):
        document = parse("#EXTM3U\nhttp://bare.test/a\n")

        (entry,) = document.entries
        assert entry.metadata_line is None
        assert entry.metadata_position is None
        assert entry.position == 1

    def test_metadata_survives_intervening_lines(self, mixed_playlist):
        document = parse(mixed_playlist)

        two = document.entries[1]
        assert two.resource_uri == "https://two.test/stream.ts"
        assert two.metadata_line == "#EXTINF:-1,Two Sports"
        assert two.metadata_position == 6
        assert two.position == 7

    def test_metadata_is_consumed_once(self, mixed_playlist):
        document = parse(mixed_playlist)

        bare = document.entries[2]
        assert bare.resource_uri == "http://bare.test/radio.mp3"
        assert bare.metadata_line is None

    def test_later_metadata_replaces_pending_one(self):
        document = parse("#EXTINF:-1,Old\n#EXTINF:-1,New\nhttp://x.test/s\n")

        (entry,) = document.entries
        assert entry.metadata_line == "#EXTINF:-1,New"
        assert entry.metadata_position == 1

    def test_lines_are_stripped_for_matching(self):
        document = parse("#EXTM3U\r\n  #EXTINF:-1,Padded  \r\n\thttp://pad.test/s \r\n")

        (entry,) = document.entries
        assert entry.resource_uri == "http://pad.test/s"
        assert entry.metadata_line == "#EXTINF:-1,Padded"

    def test_non_stream_lines_produce_no_entries(self):
        document = parse("#EXTM3U\n# comment\nrtmp://not-http.test/live\nplain text\n")

        assert document.entries == ()

    def test_empty_input(self):
        document = parse("")

        assert document.lines == ("",)
        assert document.entries == ()

    def test_custom_markers(self):
        config = PlaylistConfig(metadata_prefix="#TITLE", uri_schemes=["rtmp://", "http"])
        document = parse("#TITLE Live\nrtmp://live.test/a\n#EXTINF:-1,Ignored\nhttps://b.test/b\n", config)

        assert [e.resource_uri for e in document.entries] == ["rtmp://live.test/a", "https://b.test/b"]
        assert document.entries[0].metadata_line == "#TITLE Live"
        assert document.entries[1].metadata_line is None
