import pytest

from rsynckit.config import ProcessConfig
from rsynckit.coordinator import Rsync
from rsynckit.errors import ConfigurationError
from rsynckit.state_manager import NO_VALUE, CommandState


@pytest.fixture
def rsync() -> Rsync:
    return Rsync(ProcessConfig())


def test_set_option_with_value(rsync):
    rsync.set("rsh", "ssh")
    assert rsync.state.options == {"rsh": "ssh"}


def test_set_option_without_value(rsync):
    rsync.set("dir")
    assert rsync.state.options == {"dir": NO_VALUE}


@pytest.mark.parametrize("name", ["progress", "-progress", "--progress", "---progress"])
def test_leading_dashes_are_ignored(rsync, name):
    rsync.set(name)
    assert rsync.is_set("progress")
    assert rsync.is_set(name)
    assert list(rsync.state.options) == ["progress"]

    rsync.unset(name)
    assert not rsync.is_set("progress")


def test_last_set_wins(rsync):
    rsync.set("max-size", "1009").set("--max-size", "2009")
    assert rsync.option_value("max-size") == "2009"


def test_unset_option_that_was_not_set(rsync):
    rsync.unset("dirs")
    assert not rsync.is_set("dirs")
    assert rsync.state.options == {}


def test_option_value_distinguishes_valueless_from_missing(rsync):
    rsync.set("progress").set("max-size", "1009")
    assert rsync.option_value("--progress") is NO_VALUE
    assert rsync.option_value("--max-size") == "1009"
    assert rsync.option_value("random") is None


def test_falsy_value_is_still_set(rsync):
    rsync.set("timeout", 0)
    assert rsync.is_set("timeout")
    assert rsync.option_value("timeout") == 0


@pytest.mark.parametrize("flags", [("avz",), ("a", "v", "z"), (["a", "v", "z"],), (["a", ["v"]], "z"), ("-avz",)])
def test_set_flags_accepts_any_mixture(rsync, flags):
    rsync.set_flags(*flags)
    assert list(rsync.state.options) == ["a", "v", "z"]


def test_set_flags_in_separate_calls_cluster_like_one_call():
    one = Rsync(ProcessConfig()).set_flags("avz")
    separate = Rsync(ProcessConfig()).set_flags("a").set_flags("v").set_flags("z")
    assert one.args() == separate.args() == ["-avz"]


def test_unset_flags(rsync):
    rsync.set_flags("avz").unset_flags("z", ["a"])
    assert list(rsync.state.options) == ["v"]


def test_set_flags_rejects_non_strings(rsync):
    with pytest.raises(ConfigurationError):
        rsync.set_flags("a", 1)


def test_append_value_accumulates_in_order():
    state = CommandState()
    state.append_value("chmod", "o=rx")
    state.append_value("chmod", ["ug=rwx", "a+X"])
    assert state.option_value("chmod") == ["o=rx", "ug=rwx", "a+X"]

    state.append_value("chmod", None)
    assert not state.is_set("chmod")


def test_append_value_promotes_existing_scalar():
    state = CommandState()
    state.set("chmod", "o=rx")
    state.append_value("--chmod", "ug=rwx")
    assert state.option_value("chmod") == ["o=rx", "ug=rwx"]


def test_state_changed_is_emitted_on_mutation():
    state = CommandState()
    calls = []
    state.state_changed.connect(lambda: calls.append(True))

    state.set("a")
    state.unset("a")
    state.unset("a")
    state.add_source("src")
    state.add_source("src")

    assert len(calls) == 3


def test_debug_mode_logs_state_changes(caplog):
    state = CommandState(debug=True)
    with caplog.at_level("DEBUG", logger="rsynckit.state_manager"):
        state.set("rsh", "ssh")
    assert "options.rsh" in caplog.text


def test_boolean_values_toggle_the_option(rsync):
    rsync.set("progress", True)
    assert rsync.option_value("progress") is NO_VALUE
    assert rsync.command().endswith(" --progress")

    rsync.set("progress", False)
    assert not rsync.is_set("progress")


def test_false_value_is_not_rendered(rsync):
    rsync.set("x", False).set("timeout", 0)
    assert rsync.args() == ["--timeout=0"]
