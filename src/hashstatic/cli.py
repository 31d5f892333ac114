"""hashstatic CLI: unified entry point.

Usage:
    hashstatic serve static/                 # serve a directory over HTTP
    hashstatic serve --port 9000             # root from config / HASHSTATIC_ROOT
    hashstatic serve --trace                 # request spans on stderr
    hashstatic name css/site.css js/app.js   # print hashed names
    hashstatic parse app-<digest>.js         # split a hashed name
    hashstatic manifest --json               # plain -> hashed for every file
    hashstatic config                        # merged config and sources
"""

import argparse
import json
import sys

from dotenv import load_dotenv
load_dotenv()

from hashstatic.config import load_config, list_config
from hashstatic.log import enable_console_export, info, set_level


def _fs(args, config):
    from hashstatic.cache import HashFS
    from hashstatic.store import DirStore
    root = getattr(args, "root", None) or config.get("root")
    return HashFS(DirStore(root))


# ============================================================
# COMMANDS
# ============================================================

def cmd_serve(args, config):
    import uvicorn
    from hashstatic.server import create_app

    root = args.root or config.get("root")
    host = args.host or config.get("host")
    port = args.port or config.get("port")
    if args.trace:
        enable_console_export()
    app = create_app(_fs(args, config), cache_control=config.get("cache_control"))
    info("cli", f"serving {root} on http://{host}:{port}")
    level = str(config.get("log_level"))
    uvicorn.run(app, host=host, port=int(port), log_level="warning" if level == "warn" else level)


def cmd_name(args, config):
    fs = _fs(args, config)
    for path in args.paths:
        print(fs.hash_name(path))


def cmd_parse(args, config):
    from hashstatic.naming import parse_name
    for name in args.names:
        base, digest = parse_name(name)
        print(f"{base}\t{digest or '-'}")


def cmd_manifest(args, config):
    fs = _fs(args, config)
    mapping = fs.manifest(max_workers=int(config.get("workers")))
    if args.json:
        print(json.dumps(mapping, indent=2, sort_keys=True))
        return
    for plain, hashed in mapping.items():
        print(f"{plain} -> {hashed}")


def cmd_config(args, config):
    from rich.console import Console
    from rich.markup import escape
    console = Console()
    entries = list_config()
    width = max(len(k) for k in entries)
    for key, entry in entries.items():
        value = escape(str(entry["value"]))
        console.print(f"  [green]{key:<{width}}[/green]  {value:<40} [dim]({entry['source']})[/dim]",
                      highlight=False)


# ============================================================
# PARSERS
# ============================================================

def _build_parsers(subparsers):
    p = subparsers.add_parser("serve", help="Serve a directory with hashed names")
    p.add_argument("root", nargs="?", default=None, help="Directory to serve")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)
    p.add_argument("--trace", action="store_true", help="Print request spans to stderr")
    p.set_defaults(func=cmd_serve)

    p = subparsers.add_parser("name", help="Print the hashed name of each path")
    p.add_argument("paths", nargs="+")
    p.add_argument("--root", default=None, help="Directory the paths are relative to")
    p.set_defaults(func=cmd_name)

    p = subparsers.add_parser("parse", help="Split hashed names into base and digest")
    p.add_argument("names", nargs="+")
    p.set_defaults(func=cmd_parse)

    p = subparsers.add_parser("manifest", help="Hashed names for every file under root")
    p.add_argument("--root", default=None)
    p.add_argument("--json", action="store_true", help="Print as a JSON object")
    p.set_defaults(func=cmd_manifest)

    p = subparsers.add_parser("config", help="Show merged configuration")
    p.set_defaults(func=cmd_config)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="hashstatic",
        description="Content-hashed filenames for static assets.",
    )
    subparsers = parser.add_subparsers(dest="command")
    _build_parsers(subparsers)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    config = load_config()
    set_level(str(config.get("log_level")))
    args.func(args, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
