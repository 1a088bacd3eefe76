# src/rsynckit/rsync/command.py
"""
Builds the rsync command arguments from a command's options, filter
patterns, sources and destination.
"""

import sys
import typing

from rsynckit.rsync.escaping import EscapeSpec, resolve_escape, unixify
from rsynckit.state_manager import NO_VALUE, Pattern, PatternAction


class RsyncCommandBuilder:
    """
    Constructs the list of command-line arguments for the rsync executable.

    The builder holds no state besides its escaping setup, so building
    twice from the same configuration gives the same result.
    """

    def __init__(self, escape: EscapeSpec = True, platform: typing.Optional[str] = None) -> None:
        """
        Args:
            escape: True for the default shell escaping, False to pass
                    values through untouched, or a custom function.
            platform: Platform name used for path normalization. Defaults
                      to sys.platform.
        """
        self._escape = resolve_escape(escape)
        self._platform = platform or sys.platform

    @property
    def platform(self) -> str:
        return self._platform

    def build_option(self, name: str, value: typing.Any = NO_VALUE) -> str:
        """
        Builds a single option token.

        Single letter options use one dash and a space before the value
        (-f "- .git"), longer ones two dashes and an equals sign
        (--rsh=ssh). Options without a value, or with a boolean one, render
        as the bare flag.
        """
        single = len(name) == 1
        prefix = "-" if single else "--"
        glue = " " if single else "="

        option = prefix + name
        if value is not NO_VALUE and value is not None and not isinstance(value, bool) and str(value) != "":
            option += glue + self._escape(str(value))
        return option

    def build_options(self, options: typing.Mapping[str, typing.Any]) -> typing.List[str]:
        """
        Splits options into the clustered short flag token and the long
        option tokens, in that order.

        Single letter options without a value are gathered into one token
        (-avz). Everything else gets its own token, list values one token
        per element.
        """
        short: typing.List[str] = []
        long: typing.List[str] = []

        for name, value in options.items():
            if len(name) == 1 and value is NO_VALUE:
                short.append(name)
            elif isinstance(value, list):
                long.extend(self.build_option(name, item) for item in value)
            else:
                long.append(self.build_option(name, value))

        args: typing.List[str] = []
        if short:
            args.append("-" + "".join(short))
        args.extend(long)
        return args

    def build_patterns(self, patterns: typing.Iterable[Pattern]) -> typing.List[str]:
        """Renders filter rules in the order they were added."""
        return [
            self.build_option("exclude" if p.action is PatternAction.EXCLUDE else "include", p.pattern)
            for p in patterns
        ]

    def build_path(self, path: str) -> str:
        return self._escape(unixify(path, self._platform))

    def build_args(
        self,
        options: typing.Mapping[str, typing.Any],
        patterns: typing.Iterable[Pattern],
        sources: typing.Iterable[str],
        destination: str,
    ) -> typing.List[str]:
        """
        Builds the complete argument list.

        Order: short flags, long options, filter patterns, sources,
        destination.
        """
        args = self.build_options(options)
        args.extend(self.build_patterns(patterns))
        args.extend(self.build_path(source) for source in sources)
        if destination:
            args.append(self.build_path(destination))
        return args

    @staticmethod
    def build_command_text(executable: str, args: typing.Sequence[str]) -> str:
        """Joins the executable and arguments into the text handed to the shell."""
        return " ".join([executable, *args])
