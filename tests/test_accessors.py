import os

from conftest import assert_output
from rsynckit.config import DEFAULT_EXECUTABLE, ProcessConfig, noop
from rsynckit.coordinator import Rsync, build


def test_executable_is_set():
    rsync = Rsync.build({"source": "a.txt", "destination": "b.txt", "executable": "/usr/local/bin/rsync"},
                        process_config=ProcessConfig())
    assert rsync.executable() == "/usr/local/bin/rsync"
    assert rsync.command() == "/usr/local/bin/rsync a.txt b.txt"


def test_cwd_is_resolved(tmp_path):
    rsync = Rsync.build({"source": "a.txt", "destination": "b.txt", "cwd": str(tmp_path / "sub" / "..")},
                        process_config=ProcessConfig())
    assert rsync.cwd() == str(tmp_path)


def test_env_is_set():
    rsync = Rsync.build({"source": "a.txt", "destination": "b.txt", "env": {"red": "blue"}},
                        process_config=ProcessConfig())
    assert rsync.env()["red"] == "blue"


def test_build_ignores_unknown_keys():
    rsync = build({"source": "a", "destination": "b", "nonsense": 1, "execute": True, "_state": None},
                  process_config=ProcessConfig())
    assert_output(rsync, "a b")


def test_build_with_flags_and_patterns():
    rsync = build({
        "flags": "avz",
        "patterns": ["-.git", {"action": "+", "pattern": "*.py"}],
        "source": ["a", "b"],
        "destination": "c",
    }, process_config=ProcessConfig())
    assert_output(rsync, "-avz --exclude=.git --include=*.py a b c")


def test_output_handlers_through_build():
    out, err = [], []
    rsync = build({"output": [out.append, err.append]}, process_config=ProcessConfig())
    config = rsync._process_config
    assert config.stdout_handler == out.append
    assert config.stderr_handler == err.append


def test_register_output_handlers_keeps_missing_ones():
    rsync = Rsync(ProcessConfig())
    rsync.register_output_handlers(stdout=print)
    assert rsync._process_config.stdout_handler is print
    assert rsync._process_config.stderr_handler is noop


def test_process_config_from_environment(tmp_path):
    config = ProcessConfig.from_environment(cwd=str(tmp_path), env={"PATH": str(tmp_path)})
    assert config.cwd == str(tmp_path)
    assert config.env == {"PATH": str(tmp_path)}
    # Nothing called rsync on that PATH
    assert config.executable == DEFAULT_EXECUTABLE


def test_process_config_captures_current_process():
    config = ProcessConfig.from_environment(executable="rsync")
    assert config.cwd == os.getcwd()
    assert config.env == dict(os.environ)


def test_default_config_inherits_the_current_environment():
    assert ProcessConfig().env == dict(os.environ)


def test_env_can_be_emptied():
    rsync = Rsync(ProcessConfig(env={"red": "blue"})).env({})
    assert rsync.env() == {}
    assert rsync.env(None).env() == {}
