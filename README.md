# endpoint

`endpoint` is a small interactive shell that also acts as one end of a socket
connection. It runs in one of two roles:

- **server** (`-s`): listens on a TCP port or a UNIX domain socket, greets the
  client with a banner and sends every message back with its ASCII letters in
  upper case;
- **client** (`-c`): connects to such a server, prints whatever the server
  sends, and lets you send messages with the `send` command.

In both roles you are left at a shell prompt of the form `HH:MM user@host# `
that runs ordinary commands.

It needs a POSIX system: it uses `fork`, `os.pipe` and the password database.

## Installation

```
pip install .
```

## Usage

```
endpoint -s [options]    # run as server
endpoint -c [options]    # run as client
```

Without arguments it prints a usage line and exits with status 1; a first
argument other than `-s` or `-c` prints `Wrong arguments.` and also exits
with status 1.

Options (the same for both roles):

| Option       | Meaning                                                   |
|--------------|-----------------------------------------------------------|
| `-p PORT`    | use TCP on `127.0.0.1` and the given port                 |
| `-ip ADDR`   | use TCP with the given IPv4 address                       |
| `-u PATH`    | use a UNIX domain socket at `PATH`                        |
| `-t SECONDS` | time limit in seconds, 60 by default                      |

An option with no value after it is ignored, as are unknown words. Use only
one of `-p`, `-ip` or `-u`; a later one replaces an earlier one (so `-ip`
leaves the port unset).

Example, in two terminals:

```
endpoint -s -u /tmp/endpoint.sock
endpoint -c -u /tmp/endpoint.sock
```

On the client prompt:

```
send hello world
```

and the server answers `HELLO WORLD`.

### Time limits

- The server waits up to the time limit for a client to connect; if none
  comes it prints `No incoming connection. Shutting down.` and stops
  listening. When a client disconnects, the server waits the same way for the
  next one.
- The client closes its connection when the server has sent nothing for the
  time limit.

## Shell features

- commands separated by `;`
- comments starting with `#`
- pipelines with `|` (each side runs in its own process)
- input and output redirection with `<` and `>` (output files are created or
  truncated with mode 0644)
- a trailing `\` continues the line on the next one
- built-ins:
  - `help` – list the built-ins
  - `cd DIR` – change directory
  - `exit` – leave the shell
  - `quit` – send `disconnecting ...` over the connection, close it and leave
  - `halt` – send SIGTERM to the whole process group
  - `send MSG` – client only: send the words of `MSG` to the server (at most
    63 characters)

Everything else is run as an external program found on `PATH`.

## Library use

The pieces can be used on their own:

```python
from endpoint.config import parse_connection_args
from endpoint.server import Server, to_upper
from endpoint.shell import Shell, parse_redirection, split_commands

config = parse_connection_args(["-u", "/tmp/endpoint.sock", "-t", "30"])
print(config.address)                   # '/tmp/endpoint.sock'
print(to_upper(b"hello"))               # b'HELLO'
print(split_commands("ls; pwd"))        # ['ls', ' pwd']
print(parse_redirection("sort < in.txt"))  # (['sort'], 'in.txt', None)

with Server(config) as server:
    server.bind()
    server.serve(console=True)          # serve clients in this process
```

- `endpoint.config` – `ConnectionConfig` and `parse_connection_args`.
- `endpoint.client` – `connect`, `send_message`, `handle_server_response`,
  `receive_loop` and `run_client`.
- `endpoint.server` – `Server` (`bind`, `serve`, `communicate`, `close`),
  `to_upper` and `run_server`.
- `endpoint.shell` – `Shell` (`run`, `process_line`, `run_command`, ...),
  the parsing helpers and `ShellExit`, raised by `exit`, `quit` and `halt`.
- `endpoint.cli` – `main`, the `endpoint` command.

## What it does not do

- The server talks to one client at a time; it does not serve clients
  concurrently.
- The shell has no history, job control, quoting or variable expansion;
  arguments are split on spaces and tabs only.
- The client's inactivity message always reads "No activity for 30 seconds",
  whatever the time limit is.