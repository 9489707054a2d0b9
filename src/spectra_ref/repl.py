"""Interactive REPL for Spectra, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
import traceback
from dataclasses import dataclass
from typing import Callable

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .errors import LexError, SpectraError, SpectraRuntimeError
from .lexer_rd import tokenize
from .repl_highlight import SpectraLexer
from .runner import repl_eval
from .runtime import Frame, ShkNull, new_global_frame
from .token_types import TT
from .utils import DEBUG_PY_TRACE_ENV, debug_py_trace_enabled, stringify

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

_DEPTH_OPEN = {TT.LPAR, TT.LSQB, TT.LBRACE}
_DEPTH_CLOSE = {TT.RPAR, TT.RSQB, TT.RBRACE}


def open_depth(text: str) -> int:
    """Bracket nesting still open at the end of *text* (0 when balanced).

    Text that does not lex counts as balanced so the parser reports the error.
    """
    depth = 0

    try:
        for tok in tokenize(text):
            if tok.type in _DEPTH_OPEN:
                depth += 1
            elif tok.type in _DEPTH_CLOSE:
                depth = max(depth - 1, 0)
    except LexError:
        return 0

    return depth


@dataclass(frozen=True)
class SlashCommand:
    run: Callable[[str, list[Frame]], None]
    help: str
    usage: str = ""


def _set_py_trace(enabled: bool) -> None:
    if enabled:
        os.environ[DEBUG_PY_TRACE_ENV] = "1"
    else:
        os.environ.pop(DEBUG_PY_TRACE_ENV, None)


def _cmd_clear(_arg: str, _frame_box: list[Frame]) -> None:
    clear()


def _cmd_py_traceback(arg: str, _frame_box: list[Frame]) -> None:
    choice = arg.lower()
    if choice == "":
        _set_py_trace(not debug_py_trace_enabled())
    elif choice in ("on", "off"):
        _set_py_trace(choice == "on")
    else:
        print("Usage: /py-traceback [on|off]", file=sys.stderr)
        return

    print(f"Python traceback: {'on' if debug_py_trace_enabled() else 'off'}")


def _cmd_reset(_arg: str, frame_box: list[Frame]) -> None:
    # Mutable box so the loop picks up the new frame
    frame_box[0] = new_global_frame()
    print("Environment reset.")


SLASH_COMMANDS: dict[str, SlashCommand] = {
    "/clear": SlashCommand(_cmd_clear, "Clear the terminal screen"),
    "/py-traceback": SlashCommand(_cmd_py_traceback, "Show Python tracebacks on errors", "[on|off]"),
    "/reset": SlashCommand(_cmd_reset, "Drop all definitions"),
}


class _SlashCompleter(Completer):
    """Complete the command name while the line is still a bare `/word`."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/") or " " in text:
            return

        for name, cmd in SLASH_COMMANDS.items():
            if name.startswith(text):
                yield Completion(
                    name,
                    start_position=-len(text),
                    display=f"{name} {cmd.usage}".rstrip(),
                    display_meta=cmd.help,
                )


def handle_slash(line: str, frame_box: list[Frame]) -> bool:
    """Run a `/command [arg]` line; False means *line* is source text."""
    name, _, arg = line.strip().partition(" ")
    if not name.startswith("/"):
        return False

    cmd = SLASH_COMMANDS.get(name)
    if cmd is None:
        print(f"Unknown command: {name}", file=sys.stderr)
    else:
        cmd.run(arg.strip(), frame_box)

    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def _print_error(exc: Exception) -> None:
    print(f"Error: {exc}", file=sys.stderr)

    if debug_py_trace_enabled() and isinstance(exc, SpectraRuntimeError):
        tb = exc.spc_py_trace
        if tb:
            print("\nPython traceback:", file=sys.stderr)
            print("".join(traceback.format_tb(tb)), file=sys.stderr, end="")


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    frame_box: list[Frame] = [new_global_frame()]

    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        depth = open_depth(buf.text)

        # Keep reading lines while a brace/paren is still open.
        if depth > 0 and not buf.text.startswith("/"):
            buf.insert_text("\n" + "    " * depth)
            return

        buf.validate_and_handle()

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=SpectraLexer(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("spectra repl. Ctrl-D to exit, / for commands")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if handle_slash(text, frame_box):
            continue

        try:
            result, stmt = repl_eval(text, frame_box[0])
        except SpectraError as exc:
            _print_error(exc)
            continue

        if not stmt and not isinstance(result, ShkNull):
            print(stringify(result))


if __name__ == "__main__":
    repl()
