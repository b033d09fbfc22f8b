"""powchain.cli

Command line interface entry point for powchain.

Design constraints:
- argparse-based.
- Lazy imports: do not import heavy dependencies at parse time.

Local commands (`demo`, `verify`) work on an in-memory chain or an export file.
Remote commands (`show`, `mine`, `validate`, `tamper`) drive a running API server.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

EPILOG = "Every block commits to the one before it."


@dataclass(frozen=True)
class CliContext:
    repo_root: Path


def _repo_root_from_cwd() -> Path:
    return Path.cwd()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="powchain",
        description="Append-only, hash-linked ledger with proof-of-work.",
        epilog=EPILOG,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit.",
    )

    sub = parser.add_subparsers(dest="command")

    p_api = sub.add_parser("api", help="Start FastAPI server")
    p_api.add_argument("--host", default=None)
    p_api.add_argument("--port", type=int, default=None)

    p_demo = sub.add_parser("demo", help="Mine an in-memory chain, optionally tamper, then validate")
    p_demo.add_argument("--blocks", type=int, default=2, help="Blocks to mine after genesis.")
    p_demo.add_argument("--difficulty", type=int, default=None, help="Override configured difficulty.")
    p_demo.add_argument("--tamper", default=None, metavar="INDEX", help="Block index to tamper with.")
    p_demo.add_argument("--tamper-data", default="tampered", help="Replacement payload for --tamper.")
    p_demo.add_argument("--export", type=Path, default=None, help="Write the chain as JSON to this path.")

    p_verify = sub.add_parser("verify", help="Validate an exported chain JSON file")
    p_verify.add_argument("file", type=Path)

    for name, help_text in [
        ("show", "Print the chain held by a running server"),
        ("validate", "Validate the chain held by a running server"),
    ]:
        p = sub.add_parser(name, help=help_text)
        _add_remote_args(p)

    p_mine = sub.add_parser("mine", help="Mine a block on a running server")
    p_mine.add_argument("data", help="Text payload, or with --json a JSON object or a list of {sender, message}.")
    p_mine.add_argument("--json", action="store_true", help="Parse DATA as JSON.")
    _add_remote_args(p_mine)

    p_tamper = sub.add_parser("tamper", help="Overwrite a block's data on a running server")
    p_tamper.add_argument("index")
    p_tamper.add_argument("data")
    p_tamper.add_argument("--json", action="store_true", help="Parse DATA as JSON.")
    _add_remote_args(p_tamper)

    return parser


def _add_remote_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--url", default=None, help="API base URL (default: from config).")
    p.add_argument("--token", default=None, help="Bearer token (default: from config).")


def _print_version() -> None:
    from powchain import __version__

    print(f"powchain v{__version__}")


def _load_config(ctx: CliContext):
    from powchain.core.config import Config

    return Config.load(ctx.repo_root)


def format_chain(wire: dict[str, Any]) -> str:
    """Human-readable rendering of a chain's wire form."""

    from powchain.core.time import format_ms

    lines = [f"difficulty: {wire.get('difficulty')}"]
    for i, block in enumerate(wire.get("chain", [])):
        title = f"Block {i} (Genesis)" if i == 0 else f"Block {i}"
        lines.extend(
            [
                "",
                title,
                f"  timestamp: {format_ms(int(block['timestamp']))}",
                f"  data:      {json.dumps(block['data'], ensure_ascii=False)}",
                f"  hash:      {block['hash']}",
                f"  previous:  {block['previousHash']}",
                f"  nonce:     {block['nonce']}",
            ]
        )
    return "\n".join(lines)


def _print_report(report: dict[str, Any]) -> int:
    if report.get("valid"):
        print("chain is valid")
        return 0
    print(f"chain is INVALID: {report.get('reason')} at block {report.get('index')}")
    if report.get("message"):
        print(f"  {report['message']}")
    return 1


def _cmd_api(ctx: CliContext, args: argparse.Namespace) -> int:
    config = _load_config(ctx)

    host = args.host or config.api.host
    port = args.port or config.api.port

    import uvicorn

    uvicorn.run("api.main:create_app", factory=True, host=host, port=port, reload=False)
    return 0


def _cmd_demo(ctx: CliContext, args: argparse.Namespace) -> int:
    from powchain.core.chain import Chain
    from powchain.core.exceptions import PowchainError
    from powchain.core.log import configure_logging
    from powchain.tamper import tamper_block

    config = _load_config(ctx)
    configure_logging(config.logging)
    difficulty = config.chain.difficulty if args.difficulty is None else args.difficulty

    try:
        chain = Chain(
            difficulty,
            genesis_data=config.chain.genesis_data,
            max_nonce=config.chain.max_nonce,
        )
        for i in range(1, args.blocks + 1):
            chain.append(f"Block {i} data")
        if args.tamper is not None:
            tamper_block(chain, args.tamper, args.tamper_data)
    except PowchainError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    wire = chain.to_wire()
    print(format_chain(wire))
    print()
    if args.export is not None:
        args.export.write_text(json.dumps(wire, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        print(f"exported to {args.export}")
    return _print_report(chain.validate().to_wire())


def _cmd_verify(ctx: CliContext, args: argparse.Namespace) -> int:
    from powchain.core.chain import Chain
    from powchain.core.exceptions import PowchainError

    try:
        raw = json.loads(Path(args.file).read_text(encoding="utf-8"))
        chain = Chain.from_wire(raw)
    except (OSError, ValueError, PowchainError) as e:
        print(f"error: cannot load {args.file}: {e}", file=sys.stderr)
        return 2

    print(f"{args.file}: {len(chain)} blocks, difficulty {chain.difficulty}")
    return _print_report(chain.validate().to_wire())


def _parse_data(args: argparse.Namespace) -> Any:
    return json.loads(args.data) if args.json else args.data


def _run_remote(ctx: CliContext, args: argparse.Namespace, call: Callable[[Any], Any]) -> Any:
    from powchain.client import ChainClient

    config = _load_config(ctx)
    url = args.url or config.api.base_url
    token = args.token or config.api.auth_token or None

    async def _go() -> Any:
        async with ChainClient(url, auth_token=token) as client:
            return await call(client)

    return asyncio.run(_go())


def _remote_command(fn: Callable[[CliContext, argparse.Namespace], int]):
    def wrapper(ctx: CliContext, args: argparse.Namespace) -> int:
        import httpx

        from powchain.core.exceptions import PowchainError

        try:
            return fn(ctx, args)
        except json.JSONDecodeError as e:
            print(f"error: DATA is not valid JSON: {e}", file=sys.stderr)
            return 2
        except (httpx.HTTPError, PowchainError) as e:
            print(f"error: {e}", file=sys.stderr)
            return 1

    return wrapper


@_remote_command
def _cmd_show(ctx: CliContext, args: argparse.Namespace) -> int:
    wire = _run_remote(ctx, args, lambda c: c.get_chain())
    print(format_chain(wire))
    return 0


@_remote_command
def _cmd_validate(ctx: CliContext, args: argparse.Namespace) -> int:
    return _print_report(_run_remote(ctx, args, lambda c: c.validate()))


@_remote_command
def _cmd_mine(ctx: CliContext, args: argparse.Namespace) -> int:
    data = _parse_data(args)
    out = _run_remote(ctx, args, lambda c: c.mine(data))
    block = out["newBlock"]
    print(f"mined block {block['hash']} (nonce {block['nonce']})")
    return 0


@_remote_command
def _cmd_tamper(ctx: CliContext, args: argparse.Namespace) -> int:
    data = _parse_data(args)
    out = _run_remote(ctx, args, lambda c: c.tamper(args.index, data))
    print(out["message"])
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        _print_version()
        return 0

    if not args.command:
        parser.print_help()
        return 2

    ctx = CliContext(repo_root=_repo_root_from_cwd())

    dispatch: dict[str, Callable[[CliContext, argparse.Namespace], int]] = {
        "api": _cmd_api,
        "demo": _cmd_demo,
        "verify": _cmd_verify,
        "show": _cmd_show,
        "validate": _cmd_validate,
        "mine": _cmd_mine,
        "tamper": _cmd_tamper,
    }

    fn = dispatch.get(str(args.command))
    if fn is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 2

    return int(fn(ctx, args))


if __name__ == "__main__":
    raise SystemExit(main())
