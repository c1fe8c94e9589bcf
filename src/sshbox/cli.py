"""Command line interface for sshbox."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from .constants import DEFAULT_TIMEOUT_MS
from .errors import SSHBoxError
from .keysource import is_remote
from .pipeline import decrypt_file, encrypt_file
from .types import SSHBoxConfig

logger = logging.getLogger("sshbox")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sshbox",
        description="Encrypt and decrypt files using SSH RSA keys.",
    )
    parser.add_argument("-a", dest="armor", action="store_true", help="ASCII armour the box")
    parser.add_argument("-d", dest="decrypt", action="store_true", help="decrypt file")
    parser.add_argument("-e", dest="encrypt", action="store_true", help="encrypt file")
    parser.add_argument("-k", dest="key", default="", help="SSH key file or URL")
    parser.add_argument("-v", dest="verbose", action="store_true", help="verbose logging")
    parser.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT_MS,
        help="remote key fetch timeout in milliseconds",
    )
    parser.add_argument("paths", nargs="*", metavar="source target")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the sshbox command line.

    Args:
        argv: Arguments without the program name. Defaults to ``sys.argv[1:]``.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.decrypt and args.encrypt:
        print("[!] only one of -d or -e can be specified!")
        return 1

    if len(args.paths) != 2:
        print("[!] source and target must both be specified.")
        print(f"\t{parser.prog} [options] source target")
        return 1
    source, target = args.paths

    if not args.key:
        print("[!] no key was specified!")
        return 1

    if is_remote(args.key):
        if not args.encrypt:
            print("[+] remotely fetching private keys is not allowed.")
            return 1
        print("[+] will fetch key")

    config = SSHBoxConfig(timeout=args.timeout)
    try:
        if args.encrypt:
            encrypt_file(source, target, args.key, armor=args.armor, config=config)
        else:
            decrypt_file(source, target, args.key, config=config)
    except SSHBoxError as e:
        logger.debug("Operation failed", exc_info=True)
        print(f"[!] {e}")
        print("[!] failed.")
        return 1

    print("[+] success")
    return 0


if __name__ == "__main__":
    sys.exit(main())
