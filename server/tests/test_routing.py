"""Tests for request path classification."""

from __future__ import annotations

import pytest

from edgestats.core.routing import HELP, STATS, RouteTarget, classify_path


@pytest.mark.parametrize("path", ["", "/", "/stats", "stats"])
def test_stats_paths(path):
    assert classify_path(path) == STATS


@pytest.mark.parametrize("path, route_id", [
    ("/alpha", "alpha"),
    ("/stats/extra", "stats/extra"),
    ("/statsx", "statsx"),
    ("/a/b/c", "a/b/c"),
    ("//alpha", "/alpha"),
    ("/café", "café"),
])
def test_route_paths(path, route_id):
    assert classify_path(path) == RouteTarget(kind="hit", route_id=route_id)


@pytest.mark.parametrize("path", ["//", "///"])
def test_separator_only_paths_are_unroutable(path):
    assert classify_path(path) == HELP


def test_route_length_limit_counts_bytes():
    assert classify_path("/" + "a" * 512).kind == "hit"
    assert classify_path("/" + "a" * 513) == HELP
    # Two bytes per character in UTF-8.
    assert classify_path("/" + "é" * 257) == HELP


def test_custom_stats_identifier():
    assert classify_path("/metrics", stats_identifier="metrics") == STATS
    assert classify_path("/stats", stats_identifier="metrics").route_id == "stats"
