import pytest

from conftest import assert_output
from rsynckit.config import SHORTHAND_OPTIONS, ProcessConfig
from rsynckit.coordinator import Rsync


def _build(**config) -> Rsync:
    return Rsync.build({"source": "source", "destination": "destination", **config}, process_config=ProcessConfig())


def test_shell_sets_rsh():
    assert_output(_build(shell="ssh"), "--rsh=ssh source destination")


def test_shell_escapes_values_with_spaces():
    rsync = _build(shell="ssh -i /home/user/.ssh/rsync.key")
    assert_output(rsync, '--rsh="ssh -i /home/user/.ssh/rsync.key" source destination')


def test_shell_getter_and_unset():
    rsync = _build(shell="ssh")
    assert rsync.shell() == "ssh"
    rsync.shell("")
    assert not rsync.is_set("rsh")


def test_chmod_simple_value_through_build():
    assert_output(_build(chmod="ug=rwx"), "--chmod=ug=rwx source destination")


def test_chmod_multiple_values_through_build():
    assert_output(_build(chmod=["og=uwx", "rx=ogw"]), "--chmod=og=uwx --chmod=rx=ogw source destination")


def test_chmod_multiple_values_through_setter():
    rsync = _build()
    rsync.chmod("o=rx")
    rsync.chmod("ug=rwx")
    assert_output(rsync, "--chmod=o=rx --chmod=ug=rwx source destination")


def test_chmod_returns_all_values():
    input_values = ["og=uwx", "rx=ogw"]
    assert _build(chmod=input_values).chmod() == input_values


@pytest.mark.parametrize("name, option", SHORTHAND_OPTIONS)
def test_toggle_sets_and_unsets(name, option):
    rsync = _build()
    getattr(rsync, name)()
    expected = f"-{option}" if len(option) == 1 else f"--{option}"
    assert rsync.args()[0] == expected

    getattr(rsync, name)(False)
    assert_output(rsync, "source destination")


def test_toggles_cluster_with_other_flags():
    rsync = _build().archive().compress().set_flags("v").delete()
    assert_output(rsync, "-azv --delete source destination")


def test_toggle_through_build():
    assert_output(_build(archive=True, progress=True), "-a --progress source destination")
