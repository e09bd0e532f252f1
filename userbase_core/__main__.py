#!/usr/bin/env python3

import os
import sys
import json
import argparse
from typing import List, Optional
from collections import OrderedDict

import uvicorn
import sqlalchemy.exc

from userbase_core import settings as _settings
from userbase_core.api.api import create_app
from userbase_core.misc.logger import get_project_logger
from userbase_core.persistence import database
from userbase_core.persistence.repository import UserRepository


def get_parser(program: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=program)

    commands = parser.add_subparsers(
        description="Available sub-commands: init, users*, run",
        dest="command",
        required=True,
        metavar="<command>",
        help="the sub-command to be executed (some have their own subcommands, too)"
    )

    parser_init = commands.add_parser(
        "init",
        description="Initialize the project by creating the config file and the database tables"
    )

    parser_users = commands.add_parser(
        "users",
        description="Inspect the stored users"
    )
    users_command = parser_users.add_subparsers(
        description="Available actions: show",
        dest="action",
        metavar="<action>",
        required=True,
        help="action to perform for users"
    )
    parser_users_show = users_command.add_parser(
        "show",
        description="Show a list of all stored users"
    )

    parser_run = commands.add_parser(
        "run",
        description="Run 'uvicorn' ASGI server to serve the userbase core REST API"
    )

    parser_init.add_argument(
        "--database",
        type=str,
        metavar="url",
        help="Database connection URL including scheme and auth"
    )
    parser_init.add_argument(
        "--no-tables",
        action="store_true",
        help="Don't create the database tables, only write the config file"
    )

    parser_users_show.add_argument(
        "--json",
        action="store_true",
        help="Print the result in JSON format instead of human-readable text"
    )
    parser_users_show.add_argument(
        "--indent",
        type=int,
        metavar="n",
        help="(JSON-only) Indent the JSON response with n spaces (default: none)"
    )

    parser_run.add_argument(
        "--host",
        type=str,
        metavar="host",
        help="Bind TCP socket to this host (overwrite config)"
    )
    parser_run.add_argument(
        "--port",
        type=int,
        metavar="port",
        help="Bind TCP socket to this port (overwrite config)"
    )
    parser_run.add_argument(
        "--config",
        type=str,
        metavar="config",
        default="config.json",
        help="Overwrite the config file (defaults to 'config.json')"
    )
    parser_run.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging on all handlers"
    )
    parser_run.add_argument(
        "--debug-sql",
        action="store_true",
        help="Enable echoing of database actions (overwrites config)"
    )
    parser_run.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload"
    )
    parser_run.add_argument(
        "--workers",
        type=int,
        default=None,
        metavar="n",
        help="Number of worker processes (not valid with --reload)",
    )
    parser_run.add_argument(
        "--no-access-log",
        action="store_true",
        help="Disable access logs"
    )
    parser_run.add_argument(
        "--use-colors",
        action="store_true",
        help="Enable colorized output (may break file logs!)"
    )
    parser_run.add_argument(
        "--root-path",
        type=str,
        default="",
        metavar="p",
        help="Sub-mount the application below the given path"
    )

    return parser


def run_server(args: argparse.Namespace):
    if args.debug:
        print("Do not start the server this way during production!", file=sys.stderr)

    _settings.CONFIG_PATHS.insert(0, args.config)
    try:
        settings = _settings.Settings()
    except ValueError:
        print("Ensure that the configuration file is valid. Please correct any errors.", file=sys.stderr)
        raise

    if args.debug:
        settings.logging.root["level"] = "DEBUG"
        for handler in settings.logging.handlers:
            settings.logging.handlers[handler]["level"] = "DEBUG"
    if args.debug_sql:
        settings.database.debug_sql = args.debug_sql

    port = args.port
    if port is None:
        port = settings.server.port
    host = args.host
    if host is None:
        host = settings.server.host

    app = create_app(settings=settings)

    get_project_logger().info(f"Server running at host {host} port {port}")
    uvicorn.run(
        "userbase_core.api:api.app" if args.reload else app,
        port=port,
        host=host,
        reload=args.reload,
        workers=args.workers,
        log_level="debug" if args.debug else "info",
        log_config=settings.logging.model_dump(),
        access_log=not args.no_access_log,
        use_colors=args.use_colors,
        proxy_headers=True,
        root_path=args.root_path
    )
    return 0


def init_project(args: argparse.Namespace) -> int:
    path = os.path.abspath(_settings.CONFIG_PATHS[0])
    if os.path.exists(path):
        print(
            "A config file has been found and will be used. If you want a fresh installation, "
            "you should remove the config file and clear the database, then run this command again."
        )
        config = _settings.Settings()
    else:
        db = _settings.get_db_from_env(args.database)
        config = _settings.store_configuration(_settings.get_default_core_config(db), path)
        print(f"A new config file has been created as {path!r}.")

    if args.no_tables:
        print("Done.")
        return 0

    database.init(config.database.connection, config.database.debug_sql)
    try:
        with database.get_new_session() as session:
            count = UserRepository(session).count()
    except sqlalchemy.exc.DatabaseError:
        print(
            "The table 'users' couldn't be queried. Please check the database connection string "
            f"{config.database.connection!r} and the permissions of the database user.",
            file=sys.stderr
        )
        return 1

    print(f"Done. The database currently stores {count} user(s).")
    return 0


def print_table(objs: List[dict], keys: Optional[List[str]] = None):
    info = OrderedDict()
    if keys:
        for k in keys:
            info[k] = len(k)
    for obj in objs:
        for key in obj:
            if keys and key not in keys:
                continue
            if key not in info:
                info[key] = len(key)
            info[key] = max(len(str(obj.get(key))), info.get(key))
    print(" | ".join([f"{k:<{info[k]}}" for k in info]))
    print("-+-".join(["-" * info[k] for k in info]))
    for obj in objs:
        print(" | ".join([f"{obj[k]!s:<{info[k]}}" for k in info]))


def show_users(args: argparse.Namespace) -> int:
    config = _settings.Settings()
    database.init(config.database.connection, config.database.debug_sql)
    with database.get_new_session() as session:
        users = UserRepository(session).all()

        if args.json:
            print(json.dumps([user.schema.model_dump(mode="json", by_alias=True) for user in users], indent=args.indent))
            return 0
        print_table(
            [user.schema.model_dump(mode="json") for user in users],
            ["id", "login", "full_name", "games_played", "current_game_id"]
        )
    return 0


def handle_users(args: argparse.Namespace) -> int:
    return {
        "show": show_users
    }[args.action](args)


if __name__ == '__main__':
    program_name = sys.argv[0] if not sys.argv[0].endswith("__main__.py") else "userbase_core"
    namespace = get_parser(program_name).parse_args(sys.argv[1:])

    command_functions = {
        "run": run_server,
        "init": init_project,
        "users": handle_users
    }
    exit(command_functions[namespace.command](namespace))
