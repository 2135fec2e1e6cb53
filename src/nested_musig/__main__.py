"""
Nested MuSig2 demo entry point.

Creates `n` key pairs, arranges them in a binary aggregation tree, runs both
signing rounds over the tree and verifies the resulting Schnorr signature
under the root aggregate key.

Usage::

    python -m nested_musig -n 8
    python -m nested_musig -n 5 --message "pay bob 3 sats" --verbose
    echo 4 | python -m nested_musig

Options:
    -n, --participants  Number of signers (prompted on stdin when omitted)
    -m, --message       Message to sign (default: "test tx message")
    -v, --verbose       Enable debug logging
    --no-color          Disable colored output
"""

from __future__ import annotations

import argparse
import logging
import sys

from nested_musig.subspecs.musig import DEFAULT_SCHEME
from nested_musig.subspecs.signing import MusigBackend, SigningSession
from nested_musig.types import NestedMusigError

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_ERROR = 2

DEFAULT_MESSAGE = "test tx message"

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """
    Formats demo log lines as `time level logger: message`.

    The same instance paints the demo's own console lines, so `--no-color`
    switches off every escape sequence the demo emits.
    """

    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: RED,
    }

    def __init__(self, use_color: bool = True) -> None:
        super().__init__(datefmt="%H:%M:%S")
        self.use_color = use_color

    def paint(self, text: str, color: str) -> str:
        """Wrap `text` in `color` when colors are enabled."""
        if not self.use_color:
            return text
        return f"{color}{text}{self.RESET}"

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.paint(self.formatTime(record, self.datefmt), self.CYAN)
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        level = self.paint(f"{record.levelname:8}", color)
        name = self.paint(record.name, self.BLUE)
        return f"{timestamp} {level} {name}: {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> ColoredFormatter:
    """
    Install a stderr handler on the root logger.

    Returns:
        The installed formatter, for painting console output consistently.
    """
    level = logging.DEBUG if verbose else logging.INFO
    formatter = ColoredFormatter(use_color=not no_color)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)
    return formatter


def parse_participant_count(raw: str) -> int:
    """
    Parse a participant count.

    Raises:
        ValueError: If `raw` is not a positive integer.
    """
    count = int(raw.strip())
    if count < 1:
        raise ValueError(f"participant count must be at least 1, got {count}")
    return count


def run_demo(participants: int, message: bytes, console: ColoredFormatter) -> int:
    """
    Sign `message` with `participants` fresh keys and verify the result.

    The verdict is printed to stdout, painted by `console`.

    Returns:
        The process exit code.
    """
    scheme = DEFAULT_SCHEME
    keypairs = [scheme.key_gen() for _ in range(participants)]
    logger.info("Created %d key pairs", participants)

    try:
        session = SigningSession.create(keypairs, MusigBackend(scheme), scheme.params)
        nonce, response = session.sign(message)
        accepted = session.verify()
    except NestedMusigError as e:
        logger.error("Signing session aborted: %s", e)
        return EXIT_ERROR

    logger.info("Aggregate key: %s", session.aggregate_key.hex())
    logger.info("Signature: R=%s s=%s", nonce.hex(), response.hex())

    if accepted:
        print(console.paint("SUCCESS", console.GREEN))
        return EXIT_SUCCESS
    print(console.paint("FAIL", console.RED))
    return EXIT_FAILURE


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the demo and return its exit code."""
    parser = argparse.ArgumentParser(
        description="Convert an n-of-n MuSig2 into a binary-tree nested MuSig2 and sign once",
    )
    parser.add_argument(
        "-n",
        "--participants",
        type=str,
        default=None,
        help="Number of signers (prompted on stdin when omitted)",
    )
    parser.add_argument(
        "-m",
        "--message",
        type=str,
        default=DEFAULT_MESSAGE,
        help=f'Message to sign (default: "{DEFAULT_MESSAGE}")',
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    args = parser.parse_args(argv)

    console = setup_logging(args.verbose, args.no_color)

    raw = args.participants
    if raw is None:
        print(
            console.paint(
                "Demonstration of converting any n of n musig to binary tree merkelized nested musig",
                console.GREEN,
            )
        )
        print("Enter " + console.paint("n", console.YELLOW))
        raw = sys.stdin.readline()

    try:
        participants = parse_participant_count(raw)
    except ValueError as e:
        logger.error("Invalid participant count %r: %s", raw.strip(), e)
        return EXIT_ERROR

    return run_demo(participants, args.message.encode(), console)


if __name__ == "__main__":
    sys.exit(main())
