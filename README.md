# rinktools

Building blocks for a command-line unit calculator:

- **`rinktools.tokens`**: a tokenizer for calculator queries such as
  `3 feet to meters`, `0x1F -> binary` or `#2024-01-01#`. Call `tokenize(text)`
  to get the tokens as a list ending in a single EOF token, or step through a
  `TokenIterator` and use `peek()` to look ahead. `describe(token)` returns the
  short name that error messages use.
- **`rinktools.queryparts`**: parsers for the parts of a query that follow a
  conversion arrow. `parse_unitlist` reads lists such as `hour, minute`,
  `parse_offset` reads UTC offsets such as `+05:30` (the result is in seconds),
  `parse_base` reads `hex` or `base 7`, and `parse_digits` reads `digits 20`.
  `attr_from_name` maps an attribute word such as `survey` or `imperial` to its
  unit-name prefix.
- **`rinktools.style`**: reads and writes terminal style strings such as
  `"bold cyan on #202020"` with `parse_style`, `format_style`, `parse_color`
  and `format_color`. Colours are `NamedColor`, `FixedColor` (a palette index)
  or `RgbColor`.
- **`rinktools.config`**: the TOML configuration. It provides `Config`, `Theme`,
  `read_config` and `config_path`. `parse_duration` reads durations such as
  `"1h 30min"` and `parse_byte_size` reads sizes such as `"20 MB"`. `cached`
  keeps a download cache that falls back to a stale copy when a refresh fails,
  and `load_live_currency` uses it to fetch the currency definitions as JSON.
  An unknown key in the config file raises `ConfigError`. A missing file gives
  the default settings.
- **`rinktools.sandbox`**: the pieces for running a service in a child process:
  - `service`: the `Service` base class, with `args`, `timeout`, `create` and
    `handle`, and `Response`, which carries a result together with
    `memory_used`, `time_taken` and captured `stdout`.
  - `frame`: length-prefixed framing. Each frame is a native-endian 32-bit
    length followed by a pickled value. Sync and asyncio variants are both
    provided. Pickle is used, so frames should only be exchanged with trusted
    peers.
  - `memory`: `MemoryTracker`, which counts bytes in use against a limit,
    raises `MemoryError` past it, and records the peak.
  - `child`: `serve(...)` reads the config frame and creates the service, then
    replies with a handshake `Response`. After that it answers request frames
    until the input ends. `become_child(...)` does the same over stdin/stdout
    and then exits the process. A request that raises is reported as a
    `PanicResponse`, and the child then exits with status 1.
  - `errors`: `SandboxError` and its subclasses, such as `TimeoutExpired`,
    `Crashed`, `ChildPanic`, `HandshakeFailure` and `Interrupted`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## What this package does not do

- It does not evaluate unit expressions. There is a tokenizer and a set of
  query-part parsers, but no full expression parser, no unit database and no
  calculator.
- It has no command-line program or interactive prompt.
- The sandbox has only the child side. No class starts the child process,
  applies the per-request timeout or restarts the child after a crash. A
  caller that wants these has to spawn the child itself and use
  `rinktools.sandbox.frame` to talk to it.