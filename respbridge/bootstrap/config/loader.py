import argparse
import os
from functools import lru_cache
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="respbridge",
        description=(
            "Convert between RESP2/RESP3 bytes and structured data.\n\n"
            "decode reads one RESP value and prints it as JSON or YAML,\n"
            "encode reads one JSON document and writes its RESP encoding."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to a respbridge configuration file"
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=(
            "Logging verbosity.\n"
            "Choose among: DEBUG, INFO, WARNING, ERROR, CRITICAL.\n"
            "Defaults to the configured log_level (WARNING).\n\n"
            "Example:\n"
            "  --log-level DEBUG"
        ),
    )

    commands = parser.add_subparsers(dest="command", required=True)

    decode = commands.add_parser(
        "decode",
        help="Decode one RESP value from FILE or stdin",
        formatter_class=argparse.RawTextHelpFormatter
    )
    decode.add_argument(
        "file",
        nargs="?",
        type=Path,
        help="Input file with raw RESP bytes (default: stdin)"
    )
    decode.add_argument(
        "--tree",
        action="store_true",
        help="Print the wire value tree instead of the decoded data"
    )
    decode.add_argument(
        "-f", "--format",
        default="json",
        choices=["json", "yaml"],
        help="Output format (default: json)"
    )

    encode = commands.add_parser(
        "encode",
        help="Encode one JSON document from FILE or stdin as RESP",
    )
    encode.add_argument(
        "file",
        nargs="?",
        type=Path,
        help="Input JSON file (default: stdin)"
    )

    return parser


@lru_cache
def get_cli_args(argv: tuple[str, ...] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def get_configfile(cli_path: str | None = None) -> Path | None:
    # Priority: CLI > ENV > default file in current working directory
    raw = cli_path or os.getenv("RESPBRIDGECONFIG")

    if raw is None:
        file = Path.cwd() / "respbridge.yaml"
        return file if file.is_file() else None

    file = Path(raw)
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            "  - Or set the RESPBRIDGECONFIG environment variable\n"
            "  - Or place a 'respbridge.yaml' file in the current working directory."
        )

    return file
