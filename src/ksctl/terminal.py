"""Interactive session: operator-facing output, object previews and confirmations.

All human-facing text of a command goes through a :class:`Terminal`. The
confirmation methods are the only gate through which a destructive action
may proceed.
"""

from __future__ import annotations

import copy
import logging
import sys
from typing import Any, TextIO

import yaml
from rich.console import Console

from ksctl.utils.errors import InputError, RenderError

logger = logging.getLogger(__name__)

DANGER_ZONE_BANNER = """
###################################
####                           ####
####   !!!  DANGER ZONE  !!!   ####
####                           ####
###################################"""

_YES = ("y", "yes")
_NO = ("n", "no")


def strip_managed_fields(obj: dict[str, Any]) -> dict[str, Any]:
    """Return a deep copy of the object without server bookkeeping fields."""
    stripped = copy.deepcopy(obj)
    metadata = stripped.get("metadata")
    if isinstance(metadata, dict):
        metadata.pop("managedFields", None)
    return stripped


def render_object(obj: Any) -> str:
    """Serialize an object to the YAML block shown in previews.

    Raises:
        RenderError: If the object cannot be serialized.
    """
    if hasattr(obj, "to_dict"):
        obj = obj.to_dict()
    if not isinstance(obj, dict):
        raise RenderError(f"cannot get metadata from {obj!r}")
    try:
        return yaml.safe_dump(
            strip_managed_fields(obj),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    except yaml.YAMLError as e:
        raise RenderError(f"unable to marshal {obj!r}: {e}") from e


class Terminal:
    """Wraps an input stream and an output stream for one command invocation.

    Args:
        stdin: Stream the confirmation answers are read from.
        stdout: Stream all operator-facing output is written to.
        verbose: Whether ``debug`` messages are shown.
        default_answer: If set, confirmations do not read input and use this
            answer instead (``--assume-yes`` and tests).
    """

    def __init__(
        self,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        verbose: bool = False,
        default_answer: bool | None = None,
    ) -> None:
        self._in = stdin if stdin is not None else sys.stdin
        self._out = stdout if stdout is not None else sys.stdout
        self._verbose = verbose
        self._default_answer = default_answer
        self._console = Console(
            file=self._out,
            highlight=False,
            markup=False,
            emoji=False,
            soft_wrap=True,
        )

    @property
    def stdout(self) -> TextIO:
        """The output stream."""
        return self._out

    @property
    def verbose(self) -> bool:
        """Whether verbose output is enabled."""
        return self._verbose

    # --- Leveled output ---

    def print(self, msg: str) -> None:
        """Print a message without a trailing line feed."""
        self._console.print(msg, end="")

    def printf(self, fmt: str, *args: Any) -> None:
        """Print a %-style formatted message without a trailing line feed."""
        self.print(fmt % args if args else fmt)

    def println(self, msg: str = "") -> None:
        """Print a message followed by a line feed."""
        self._console.print(msg)

    def info(self, msg: str) -> None:
        """Print an informational message."""
        self._console.print(msg, style="cyan")

    def warn(self, msg: str) -> None:
        """Print a warning, visually distinguished to flag risk."""
        self._console.print(msg, style="bold red")

    def debug(self, msg: str) -> None:
        """Print a message only in verbose mode."""
        if self._verbose:
            self._console.print(msg, style="dim")

    # --- Structured output ---

    def print_context_separator(self, context: str, body: str | None = None) -> None:
        """Print a titled banner, optionally followed by a body."""
        line = "-" * self._console.width
        self._console.print("\n" + line)
        self._console.print(" " + context)
        if body:
            self._console.print(line)
            self._console.print(body.rstrip("\n"))
        self._console.print(line)

    def print_object(self, title: str, obj: Any) -> None:
        """Print an object as YAML under a titled banner.

        ``metadata.managedFields`` is stripped before display.

        Raises:
            RenderError: If the object cannot be rendered.
        """
        body = render_object(obj)
        self.print_context_separator(title, body)

    # --- Prompts ---

    def _read_line(self) -> str:
        try:
            line = self._in.readline()
        except (OSError, ValueError) as e:
            raise InputError(f"unable to read from input: {e}") from e
        if line == "":
            raise InputError("unable to read from input: EOF")
        return line.strip()

    def confirm(self, prompt: str, *args: Any) -> bool:
        """Ask a yes/no question and wait for a single line of input.

        Answers are case-insensitive ``y``/``yes``/``n``/``no``; anything
        else asks again.

        Raises:
            InputError: If the answer cannot be read (e.g. closed input).
        """
        question = prompt % args if args else prompt
        self.println(question)
        self.println("===============================")
        while True:
            self.print("[y/n] -> ")
            if self._default_answer is not None:
                text = "y" if self._default_answer else "n"
            else:
                text = self._read_line()
            self.println(f"response: '{text}'")
            answer = text.lower()
            if answer in _YES:
                logger.info(f"Confirmed: {question}")
                return True
            if answer in _NO:
                logger.info(f"Declined: {question}")
                return False
            self.println("answer y or n")

    def danger_zone(self, consequence: str, prompt: str, *args: Any) -> bool:
        """Ask for confirmation of an irreversible action.

        The danger zone banner and the consequence are printed before the
        question.
        """
        self.warn(DANGER_ZONE_BANNER)
        self.warn(f"THIS COMMAND WILL CAUSE {consequence.upper()}")
        return self.confirm(prompt, *args)

    def select(self, title: str, options: list[str]) -> str:
        """Show a numbered menu and return the chosen option.

        Raises:
            InputError: If there are no options or the answer cannot be read.
        """
        if not options:
            raise InputError(f"no options to choose from for '{title}'")
        self.println(title)
        for index, option in enumerate(options, start=1):
            self.println(f"  {index}) {option}")
        while True:
            self.print(f"[1-{len(options)}] -> ")
            if self._default_answer is not None:
                text = "1"
            else:
                text = self._read_line()
            self.println(f"response: '{text}'")
            if text.isdigit() and 1 <= int(text) <= len(options):
                return options[int(text) - 1]
            self.println(f"answer a number between 1 and {len(options)}")
