"""Interactive command shell with pipes, redirection, comments and built-ins."""

from __future__ import annotations

import contextlib
import os
import pwd
import re
import signal
import socket
import subprocess
import sys
import time
from typing import IO, Optional

MAX_LINE = 1024
MAX_ARGS = 64
MAX_MSG_LEN = 64

_ARG_SEPARATORS = re.compile(r"[ \t]")


class ShellExit(SystemExit):
    """Raised by the exit, quit and halt built-ins to leave the shell."""


def prompt() -> str:
    """Return the prompt text: current time, user name and host name."""
    hostname = socket.gethostname()
    username = pwd.getpwuid(os.getuid()).pw_name
    return f"{time.strftime('%H:%M')} {username}@{hostname}# "


def display_shell_prompt() -> None:
    """Print the prompt without a trailing newline."""
    print(prompt(), end="", flush=True)


def read_command_line(stream: Optional[IO[str]] = None) -> Optional[str]:
    """Read one logical line, joining lines that end with a backslash.

    Returns None at end of input.
    """
    if stream is None:
        stream = sys.stdin
    line = stream.readline()
    if not line:
        return None
    while line.endswith("\\\n"):
        line = line[:-2]
        print("> ", end="", flush=True)
        next_line = stream.readline()
        if not next_line:
            break
        if len(line) + len(next_line) >= MAX_LINE:
            print("Error: Input too long, buffer overflow risk.", file=sys.stderr)
            break
        line += next_line
    return line


def split_commands(line: str) -> list[str]:
    """Split a line into the commands separated by semicolons."""
    return line.split(";")


def clean_command(command: str) -> str:
    """Drop the newline and what follows it, leading spaces and any comment."""
    command = command.split("\n", 1)[0].lstrip(" ")
    return command.split("#", 1)[0]


def parse_args(command: str) -> list[str]:
    """Split a command into arguments on spaces and tabs."""
    return [token for token in _ARG_SEPARATORS.split(command) if token]


def parse_redirection(command: str) -> tuple[list[str], Optional[str], Optional[str]]:
    """Split a command into its arguments, input file and output file.

    The output file follows the first '>', the input file the first '<'
    before it; leading spaces of each file name are skipped.
    """
    output_file = None
    if ">" in command:
        command, output_file = command.split(">", 1)
        output_file = output_file.lstrip(" ")
    input_file = None
    if "<" in command:
        command, input_file = command.split("<", 1)
        input_file = input_file.lstrip(" ")
    return parse_args(command), input_file, output_file


def help_text(is_client: bool) -> str:
    """Return the text printed by the help built-in."""
    lines = [
        "Simple Shell Help:",
        "  cd [dir]     - change directory",
        "  exit         - exit shell",
        "  help         - show this help message",
        "  quit           - Gracefully quit the shell",
        "  halt           - Immediately quit the shell",
    ]
    if is_client:
        lines.append("  send [msg]     - Send a message to the server")
    lines.append("Supports:")
    lines.append("  Piping (|), Redirection (<, >), Multiple cmds (;), Comments (#)")
    return "\n".join(lines) + "\n"


def _exit_status(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _flush_std_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        with contextlib.suppress(Exception):
            stream.flush()


class Shell:
    """A shell session that may be tied to a connected socket."""

    def __init__(self, sock: Optional[socket.socket] = None, is_client: bool = False) -> None:
        self.sock = sock
        self.is_client = is_client

    def run(self, stream: Optional[IO[str]] = None) -> None:
        """Prompt for and execute lines until the input ends."""
        while True:
            display_shell_prompt()
            line = read_command_line(stream)
            if line is None:
                break
            self.process_line(line)

    def process_line(self, line: str) -> None:
        """Execute every semicolon-separated command of a line."""
        for command in split_commands(line):
            self.run_command(command)

    def run_command(self, command: str) -> None:
        """Execute one command: pipeline, redirection, built-in or program."""
        command = clean_command(command)
        if not command:
            return

        if "|" in command:
            left_cmd, right_cmd = command.split("|", 1)
            self.handle_pipeline(left_cmd, right_cmd)
            return

        if "<" in command or ">" in command:
            self.handle_redirection(command)
            return

        args = parse_args(command)
        if not args:
            return
        name = args[0]

        if name == "help":
            print(help_text(self.is_client), end="")
        elif name == "exit":
            raise ShellExit(0)
        elif name == "cd":
            if len(args) > 1:
                with contextlib.suppress(OSError):
                    os.chdir(args[1])
            else:
                print("cd: missing argument", file=sys.stderr)
        elif name == "send" and self.is_client:
            self._send(args[1:])
        elif name == "quit":
            self._quit()
        elif name == "halt":
            os.kill(0, signal.SIGTERM)
            raise ShellExit(1)
        else:
            self._execute(args)

    def _send(self, words: list[str]) -> None:
        if not words:
            print("Error: No message provided to send.")
            return
        message = " ".join(words)[: MAX_MSG_LEN - 1]
        if self.sock is not None:
            self.sock.sendall(message.encode())

    def _quit(self) -> None:
        if self.sock is not None:
            with contextlib.suppress(OSError):
                self.sock.sendall(b"disconnecting ...\n")
            self.sock.close()
        raise ShellExit(0)

    @staticmethod
    def _execute(args: list[str], stdin=None, stdout=None) -> None:
        _flush_std_streams()
        try:
            subprocess.run(args, stdin=stdin, stdout=stdout, check=False)
        except (OSError, ValueError) as exc:
            print(f"execvp: {exc}", file=sys.stderr)

    def handle_pipeline(self, left_cmd: str, right_cmd: str) -> None:
        """Run two commands with the output of the first fed to the second."""
        read_fd, write_fd = os.pipe()
        _flush_std_streams()
        left_pid = self._spawn(left_cmd, keep=write_fd, close=read_fd, target=1)
        right_pid = self._spawn(right_cmd, keep=read_fd, close=write_fd, target=0)
        os.close(read_fd)
        os.close(write_fd)
        os.waitpid(left_pid, 0)
        os.waitpid(right_pid, 0)

    def _spawn(self, command: str, keep: int, close: int, target: int) -> int:
        pid = os.fork()
        if pid:
            return pid
        status = 1
        try:
            os.close(close)
            os.dup2(keep, target)
            os.close(keep)
            # Route Python-level output through the redirected descriptors.
            sys.stdin = open(0, "r", closefd=False)
            sys.stdout = open(1, "w", closefd=False)
            sys.stderr = open(2, "w", closefd=False)
            self.run_command(command)
        except SystemExit as exc:
            status = _exit_status(exc.code)
        except BaseException as exc:  # the child must never return to the caller
            with contextlib.suppress(Exception):
                print(f"{command.strip()}: {exc}", file=sys.stderr)
        finally:
            _flush_std_streams()
            os._exit(status)

    def handle_redirection(self, command: str) -> None:
        """Run a program with its input and/or output redirected to files."""
        args, input_file, output_file = parse_redirection(command)
        with contextlib.ExitStack() as stack:
            stdin = stdout = None
            if input_file is not None:
                try:
                    fd = os.open(input_file, os.O_RDONLY)
                except OSError as exc:
                    print(f"open input: {exc}", file=sys.stderr)
                    return
                stack.callback(os.close, fd)
                stdin = fd
            if output_file is not None:
                try:
                    fd = os.open(output_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
                except OSError as exc:
                    print(f"open output: {exc}", file=sys.stderr)
                    return
                stack.callback(os.close, fd)
                stdout = fd
            if not args:
                print("execvp: no command given", file=sys.stderr)
                return
            self._execute(args, stdin=stdin, stdout=stdout)