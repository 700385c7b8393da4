import argparse
import json
import logging
import sys
from typing import Any, BinaryIO

from respbridge.bootstrap.config.loader import get_cli_args
from respbridge.bootstrap.deps import get_codec, get_renderer, get_settings
from respbridge.core.facade import RespCodec
from respbridge.core.helpers.utils import setup_logging
from respbridge.core.models.errors import RespError
from respbridge.infra.format_renderer import wire_tree

logger = logging.getLogger("bootstrap.cli")


def _read_input(args: argparse.Namespace, stdin: BinaryIO) -> bytes:
    if args.file is None:
        return stdin.read()
    return args.file.read_bytes()


def cmd_decode(codec: RespCodec, args: argparse.Namespace, data: bytes) -> str:
    if args.tree:
        result: Any = wire_tree(codec.parse(data))
    else:
        result = codec.deserialize_from_bytes(data)
    return get_renderer(args.format).render(result)


def cmd_encode(codec: RespCodec, args: argparse.Namespace, data: bytes) -> bytes:
    try:
        document = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as ex:
        raise ValueError(f"input is not a JSON document: {ex}") from ex
    return codec.serialize_to_bytes(document)


def main(argv: list[str] | None = None) -> int:
    args = get_cli_args(tuple(argv) if argv is not None else None)
    settings = get_settings(args.config)
    setup_logging(args.log_level or settings.log_level)

    codec = get_codec(args.config)
    logger.debug(f"Running {args.command} with max_depth={codec.config.max_depth}")

    try:
        data = _read_input(args, sys.stdin.buffer)
        if args.command == "decode":
            sys.stdout.write(cmd_decode(codec, args, data))
            sys.stdout.flush()
        else:
            sys.stdout.buffer.write(cmd_encode(codec, args, data))
            sys.stdout.buffer.flush()
    except (RespError, OSError, ValueError) as ex:
        logger.debug(f"{args.command} failed: {ex!r}")
        print(f"respbridge {args.command}: {ex}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
