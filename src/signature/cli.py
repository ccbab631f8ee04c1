"""
RSA Signature CLI

Commands:
  sign      - Sign a message with a PEM "RSA PRIVATE KEY"
  verify    - Verify a base64 signature with a PEM "PUBLIC KEY"
"""

import argparse
import logging
import os
import sys

import structlog

from .errors import SignatureError
from .operations import generate, verify


def configure_logging(verbose=False):
    """Send structlog output to stderr so stdout carries only results."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING
        ),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def _read_key(path, env_var):
    path = path or os.environ.get(env_var)
    if not path:
        print(f"Error: --key or {env_var} required")
        sys.exit(1)

    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        print(f"Error: could not read key file: {e}")
        sys.exit(1)


def _read_message(args):
    if args.file:
        try:
            with open(args.file, "rb") as f:
                return f.read()
        except OSError as e:
            print(f"Error: could not read message file: {e}")
            sys.exit(1)
    if args.message is not None:
        return args.message.encode("utf-8")
    return sys.stdin.buffer.read()


def cmd_sign(args):
    """Sign a message and print the base64 signature."""
    private_key = _read_key(args.key, "SIGNATURE_PRIVATE_KEY")
    message = _read_message(args)

    try:
        print(generate(private_key, message))
    except SignatureError as e:
        print(f"Error: {e}")
        sys.exit(1)


def cmd_verify(args):
    """Verify a base64 signature."""
    public_key = _read_key(args.key, "SIGNATURE_PUBLIC_KEY")
    message = _read_message(args)

    valid, error = verify(args.signature, public_key, message)
    if valid:
        print("Signature Valid")
    else:
        print(f"Signature Invalid: {error}")
        sys.exit(1)


def _add_message_args(parser):
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--message", help="Message text (UTF-8)")
    source.add_argument("--file", help="Read the message from a file")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="RSA PKCS#1 v1.5 / SHA-256 signatures",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="With neither --message nor --file the message is read from stdin.",
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Log to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # sign
    sign_parser = subparsers.add_parser("sign", help="Sign a message")
    sign_parser.add_argument("--key", help="Path to PEM private key")
    _add_message_args(sign_parser)

    # verify
    verify_parser = subparsers.add_parser("verify", help="Verify a signature")
    verify_parser.add_argument("--key", help="Path to PEM public key")
    verify_parser.add_argument("--signature", required=True, help="Base64 signature")
    _add_message_args(verify_parser)

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "sign":
        cmd_sign(args)
    elif args.command == "verify":
        cmd_verify(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
