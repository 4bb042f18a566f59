"""
Command-line interface for yaml-crypt.

This module orchestrates all other components:
- reading the configuration file and key specifiers
- validating option combinations
- dispatching to key generation, edit, file or stream mode
- mapping errors to exit codes
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import traceback
from pathlib import Path
from typing import BinaryIO, List, Mapping, Optional

import yaml

from . import algorithms as registry
from .config import (
    EXIT_CONFIG,
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_OK,
    EXIT_USAGE,
    TOOL_NAME,
    TOOL_VERSION,
    get_editor,
)
from .configfile import Configuration
from .editor import run_edit
from .errors import ConfigurationError, UsageError, YamlCryptError
from .files import process_file
from .keys import KeySet, build_key_set
from .transformer import Direction, Transformer, TransformOptions


# ---------------------------------------------------------------------------
# Color output helpers
# ---------------------------------------------------------------------------


class Colors:
    """ANSI color codes for terminal output."""
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    RESET = "\033[0m"
    BOLD = "\033[1m"


def colored(text: str, color: str) -> str:
    """Return colored text when stderr is a terminal."""
    if not sys.stderr.isatty():
        return text
    return f"{color}{text}{Colors.RESET}"


def print_error(msg: str) -> None:
    print(colored(f"{TOOL_NAME}: error: {msg}", Colors.RED), file=sys.stderr)


def print_success(msg: str) -> None:
    print(colored(f"✓ {msg}", Colors.GREEN), file=sys.stderr)


def print_warning(msg: str) -> None:
    print(colored(f"⚠ warning: {msg}", Colors.YELLOW), file=sys.stderr)


# ---------------------------------------------------------------------------
# CLI context
# ---------------------------------------------------------------------------


class CLIContext:
    """Shared state for one invocation."""

    def __init__(
        self,
        args: argparse.Namespace,
        config: Configuration,
        stdin: BinaryIO,
        stdout: BinaryIO,
        environ: Mapping[str, str],
    ):
        self.args = args
        self.config = config
        self.stdin = stdin
        self.stdout = stdout
        self.environ = environ

        # Lazy-loaded
        self._key_set: Optional[KeySet] = None

    @property
    def key_set(self) -> KeySet:
        if self._key_set is None:
            self._key_set = build_key_set(
                key_specs=self.args.k,
                encryption_spec=self.args.K,
                config_keys=self.config.keys,
                environ=self.environ,
            )
        return self._key_set

    @property
    def options(self) -> TransformOptions:
        return TransformOptions(
            algorithm=registry.resolve_algorithm(self.args.algorithm) if self.args.algorithm else None,
            base64=self.args.base64,
            path=self.args.path,
            raw=self.args.raw,
        )

    @property
    def expected_direction(self) -> Optional[Direction]:
        if self.args.encrypt:
            return Direction.ENCRYPT
        if self.args.decrypt:
            return Direction.DECRYPT
        return None

    def log(self, msg: str) -> None:
        """Log message if not quiet."""
        if not self.args.quiet:
            print_success(msg)

    def log_verbose(self, msg: str) -> None:
        """Log message if debugging."""
        if self.args.debug:
            print(colored(f"  → {msg}", Colors.BLUE), file=sys.stderr)


# ---------------------------------------------------------------------------
# Command implementations
# ---------------------------------------------------------------------------


def cmd_generate_key(ctx: CLIContext) -> int:
    """Print a new random key for the selected algorithm."""
    key = registry.generate_key(ctx.args.algorithm)
    ctx.stdout.write(key.encode("ascii") + b"\n")
    ctx.stdout.flush()
    return EXIT_OK


def cmd_edit(ctx: CLIContext) -> int:
    """Open every file in the editor, transparently decrypting it."""
    editor = get_editor(ctx.config.editor, ctx.environ)
    for file in ctx.args.file:
        ctx.log_verbose(f"Editing {file} with {editor}")
        run_edit(file, ctx.key_set, ctx.options, editor)
    return EXIT_OK


def cmd_files(ctx: CLIContext) -> int:
    """Encrypt or decrypt the given files, based on their extension."""
    processed_count = 0
    failed_count = 0

    for file in ctx.args.file:
        path = Path(file)
        try:
            if path.is_dir():
                raise UsageError(f"directories are not supported: {file}")
            output = process_file(
                path,
                ctx.key_set,
                ctx.options,
                expected=ctx.expected_direction,
                keep=ctx.args.keep,
                force=ctx.args.force,
            )
            ctx.log(f"{path} → {output}")
            processed_count += 1
        except YamlCryptError as e:
            if not ctx.args.keep_going:
                raise
            print_error(str(e))
            failed_count += 1

    if failed_count > 0:
        print_warning(f"Processed {processed_count} file(s), {failed_count} failed")
        return EXIT_FAILURE
    return EXIT_OK


def cmd_stream(ctx: CLIContext) -> int:
    """Transform stdin to stdout."""
    direction = ctx.expected_direction
    if direction is None:
        raise UsageError("no input files, but no operation (--encrypt/--decrypt) given!")

    content = ctx.stdin.read()
    result = Transformer(ctx.key_set).transform_content(content, direction, ctx.options)
    ctx.stdout.write(result)
    ctx.stdout.flush()
    return EXIT_OK


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog=TOOL_NAME,
        description="Encrypt and decrypt YAML documents",
        epilog=(
            "Keys can be given as c:<name> (configuration file), e:<var> "
            "(environment), fd:<n> (file descriptor) or f:<path> (file, the "
            "default). All decryption keys are tried in order."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {TOOL_VERSION}")
    parser.add_argument("--debug", action="store_true", help="Show debugging output")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress non-error output")
    parser.add_argument("-e", "--encrypt", action="store_true", help="Encrypt data")
    parser.add_argument("-d", "--decrypt", action="store_true", help="Decrypt data")
    parser.add_argument(
        "-G", "--generate-key",
        action="store_true",
        help="Generate a new random key and print it. Use -a to specify the algorithm",
    )
    parser.add_argument(
        "-k",
        action="append",
        metavar="<key>",
        help="Use the given key to decrypt data. Can be given multiple times",
    )
    parser.add_argument("-K", metavar="<key>", help="Use the given key to encrypt data")
    parser.add_argument(
        "-a", "--algorithm",
        metavar="<algorithm>",
        help="The encryption algorithm to use: "
        + ", ".join(registry.list_algorithms())
        + " (default: first)",
    )
    parser.add_argument(
        "-E", "--edit",
        action="store_true",
        help="Open an editor for the given files, transparently decrypting and encrypting the file content",
    )
    parser.add_argument(
        "-B", "--base64",
        action="store_true",
        help="Encode values using Base64 encoding before encrypting and decode values after decrypting",
    )
    parser.add_argument(
        "--path",
        metavar="<yaml-path>",
        help='Only process values below the given YAML path, e.g. "--path=obj.key"',
    )
    parser.add_argument("--raw", action="store_true", help="Encrypt/decrypt raw messages instead of YAML documents")
    parser.add_argument(
        "--continue",
        dest="keep_going",
        action="store_true",
        help="Continue processing even when encryption/decryption of one or more files failed",
    )
    parser.add_argument("--keep", action="store_true", help="Keep the original files after encryption/decryption")
    parser.add_argument("-f", "--force", action="store_true", help="Overwrite existing files")
    parser.add_argument("file", nargs="*", metavar="<file>", help="Input file(s) to process")
    return parser


def validate_args(args: argparse.Namespace, config: Configuration) -> None:
    """
    Reject option combinations that make no sense.

    Raises:
        UsageError
    """

    exclusive = [
        ("encrypt", "decrypt"),
        ("raw", "path"),
        ("edit", "path"),
        ("edit", "keep"),
        ("edit", "encrypt"),
        ("edit", "decrypt"),
        ("generate_key", "encrypt"),
        ("generate_key", "decrypt"),
        ("generate_key", "edit"),
    ]
    for first, second in exclusive:
        if getattr(args, first) and getattr(args, second):
            raise UsageError(
                f"cannot combine --{first.replace('_', '-')} and --{second.replace('_', '-')}!"
            )

    if args.edit and not args.file:
        raise UsageError("option --edit used, but no files given!")
    if not args.generate_key and not args.k and not args.K and not config.keys:
        raise UsageError("no keys given and no default keys configured!")
    if args.keep and not args.file:
        raise UsageError("option --keep used, but no files given!")
    if args.generate_key and args.file:
        raise UsageError("option --generate-key used, but files given!")


def load_config() -> Configuration:
    """Read the configuration file, falling back to an empty one."""
    try:
        return Configuration.discover()
    except (OSError, yaml.YAMLError) as e:
        print_warning("could not read config file, using default!")
        print_warning(f"error: {e}")
        return Configuration()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def main(
    argv: Optional[List[str]] = None,
    config: Optional[Configuration] = None,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        if config is None:
            config = load_config()
        validate_args(args, config)

        ctx = CLIContext(
            args=args,
            config=config,
            stdin=stdin if stdin is not None else sys.stdin.buffer,
            stdout=stdout if stdout is not None else sys.stdout.buffer,
            environ=os.environ if environ is None else environ,
        )

        if args.generate_key:
            return cmd_generate_key(ctx)
        if args.edit:
            return cmd_edit(ctx)
        if args.file:
            return cmd_files(ctx)
        return cmd_stream(ctx)

    except KeyboardInterrupt:
        print_error("Interrupted")
        return EXIT_INTERRUPTED
    except ConfigurationError as e:
        print(f"{TOOL_NAME}: could not parse configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except (YamlCryptError, OSError) as e:
        print_error(str(e))
        if args.debug:
            traceback.print_exc()
        return EXIT_USAGE
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        if args.debug:
            traceback.print_exc()
        return EXIT_FAILURE


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
