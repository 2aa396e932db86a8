import pytest

from buildlink import share
from buildlink.codec import BuildState

STATE = BuildState([{"yellow.attack_boost": 1}, {}, {}])


@pytest.mark.parametrize("base_url", ["https://example.org/planner", "https://example.org/planner/"])
def test_create_share_url(base_url):
    assert share.create_share_url(base_url, STATE) == "https://example.org/planner/1-3-1_1--"


@pytest.mark.parametrize("path, expected", [
    ("/planner/1-3-1_1--", "1-3-1_1--"),
    ("/planner/1-3-1_1--/", "1-3-1_1--"),
    ("/0-", "0-"),
    ("/planner/", None),
    ("/planner", None),
    ("/", None),
    ("", None),
    ("/x", None),
    ("/planner/a.b", None),
    ("/planner/%20", None),
])
def test_extract_build_code(path, expected):
    assert share.extract_build_code(path, "/planner/") == expected


def test_load_build_from_path():
    state = share.load_build_from_path("/planner/1-3-1_1---o5", "/planner/")
    assert state.level(0, "yellow.attack_boost") == 1
    assert state.owned == 5


def test_load_build_from_path_rejects_other_segments():
    assert share.load_build_from_path("/planner/hello", "/planner/") is None
    assert share.load_build_from_path("/planner/", "/planner/") is None
