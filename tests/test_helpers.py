"""Tests for helper utilities."""

import pytest

from bz_cli.utils import helpers
from bz_cli.utils.helpers import expand_template, find_first_existing, find_file_upwards, to_env_key


def test_to_env_key():
    assert to_env_key("github.com/acme/my-tool") == "GITHUB_COM_ACME_MY_TOOL"


def test_expand_template_keeps_unknown_names():
    assert expand_template("${A}/$B/$C", {"A": "1", "B": "2"}) == "1/2/$C"


def test_expand_template_keeps_double_dollar():
    assert expand_template("echo $$ $$A $A", {"A": "1"}) == "echo $$ $$A 1"


@pytest.mark.parametrize("machine,expected", [
    ("x86_64", "amd64"),
    ("AMD64", "amd64"),
    ("aarch64", "arm64"),
    ("i686", "386"),
    ("armv7l", "arm"),
    ("riscv64", "riscv64"),
])
def test_detect_arch(monkeypatch, machine, expected):
    monkeypatch.setattr(helpers.platform, "machine", lambda: machine)
    assert helpers.detect_arch() == expected


class TestFindFileUpwards:
    """Test upward config discovery."""

    def test_finds_nearest_parent(self, tmp_path):
        (tmp_path / ".bz.yml").write_text("deps: []\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        directory, found = find_file_upwards([".bz.json", ".bz.yml"], str(nested))

        assert directory == str(tmp_path.resolve())
        assert found == str(tmp_path.resolve() / ".bz.yml")

    def test_prefers_earlier_name_in_same_directory(self, tmp_path):
        (tmp_path / ".bz.json").write_text("{}")
        (tmp_path / ".bz.yml").write_text("")
        assert find_first_existing(str(tmp_path), [".bz.yml", ".bz.json"]) == str(tmp_path / ".bz.yml")

    def test_not_found(self, tmp_path):
        assert find_file_upwards(["bz-test-missing-name"], str(tmp_path)) == (None, None)
