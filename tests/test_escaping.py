import pytest

from rsynckit.rsync.escaping import escape_shell_arg, no_escape, resolve_escape, unixify


@pytest.mark.parametrize("arg", ["a_b.txt", "some/dir/", "*.tiff", "ug=rwx", "--weird", ""])
def test_escape_leaves_plain_arguments_alone(arg):
    assert escape_shell_arg(arg) == arg


def test_escape_quotes_arguments_with_spaces():
    assert escape_shell_arg("a b") == '"a b"'


def test_escape_backslashes_special_characters():
    assert escape_shell_arg("$HOME") == '"\\$HOME"'
    assert escape_shell_arg('say "hi"') == '"say \\"hi\\""'
    assert escape_shell_arg("it's") == '"it\\\'s"'
    assert escape_shell_arg("`id`") == '"\\`id\\`"'
    assert escape_shell_arg("a\\b") == '"a\\\\b"'


def test_resolve_escape_options():
    assert resolve_escape(True) is escape_shell_arg
    assert resolve_escape(None) is escape_shell_arg
    assert resolve_escape(False) is no_escape
    upper = str.upper
    assert resolve_escape(upper) is upper
    with pytest.raises(TypeError):
        resolve_escape("yes")


def test_unixify_rewrites_windows_paths_on_win32():
    assert unixify("C:\\a\\b\\c.txt", "win32") == "/a/b/c.txt"
    assert unixify("C:\\home\\username\\develop\\", "win32") == "/home/username/develop/"
    assert unixify("relative\\dir", "win32") == "relative/dir"


def test_unixify_passes_paths_through_elsewhere():
    assert unixify("C:\\a\\b", "linux") == "C:\\a\\b"
    assert unixify("/srv/data", "darwin") == "/srv/data"
