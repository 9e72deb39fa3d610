#!/usr/bin/env python3
"""Node service administration CLI.

Talks to the orchestrator on behalf of this service (register, login,
resolve, confirm-install) and manages the locally stored credentials.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

load_dotenv('.env')

from node_service.constants import CREDENTIALS_FILE, NODE_CONFIG_FILE
from node_service.dependencies import build_orchestrator_proxy
from node_service.models.credentials import Credentials
from node_service.orchestrator.errors import OrchestratorError
from node_service.processing import ProcessorNotFound, resolve_processor
from node_service.services.credential_store import FileCredentialStore
from node_service.services.node_executor import NodeExecutor, ProcessingContractError
from node_service.services.settings_service import ConfigurationError, load_settings

logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')

console = Console()


def get_settings(args):
    return load_settings(Path(args.config))


def get_store(args) -> FileCredentialStore:
    return FileCredentialStore(Path(args.credentials))


def get_proxy(args):
    return build_orchestrator_proxy(get_settings(args), get_store(args))


def cmd_register(args) -> int:
    """Register this service with the orchestrator."""
    settings = get_settings(args)
    asyncio.run(get_proxy(args).register(settings.service))
    console.print(f"[green]✓ Registered {settings.service.name} on {settings.orchestrator.base_url}[/green]")
    return 0


def cmd_login(args) -> int:
    """Check that the stored credentials can log in."""
    store = get_store(args)
    asyncio.run(get_proxy(args).authenticate())
    console.print(f"[green]✓ Logged in as {store.load().name}[/green]")
    return 0


def cmd_resolve(args) -> int:
    """Print the orchestrator-assigned id of this service."""
    settings = get_settings(args)
    proxy = get_proxy(args)

    async def resolve():
        token = await proxy.authenticate()
        return await proxy.resolve_service_id(token, settings.service)

    console.print(asyncio.run(resolve()))
    return 0


def cmd_confirm_install(args) -> int:
    """Confirm the installation of this service."""
    settings = get_settings(args)
    result = asyncio.run(get_proxy(args).confirm_install(settings.service))
    console.print(f"[green]✓ Install confirmed:[/green] {result.message}")
    return 0


def cmd_credentials_show(args) -> int:
    """Show stored credentials (password masked)."""
    store = get_store(args)
    credentials = store.load()

    table = Table(title="Stored credentials")
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("File", str(store.credentials_file))
    table.add_row("Name", credentials.name)
    table.add_row("Password", "*" * len(credentials.password))
    table.add_row("Placeholder", "yes" if credentials == Credentials.default() else "no")
    console.print(table)
    return 0


def cmd_credentials_set(args) -> int:
    """Replace stored credentials."""
    get_store(args).store(Credentials(name=args.name, password=args.password))
    console.print(f"[green]✓ Credentials stored for {args.name}[/green]")
    return 0


def cmd_schema(args) -> int:
    """Print the node interface schema served on GET /install."""
    settings = get_settings(args)
    console.print_json(json.dumps(settings.node_schema.to_wire()))
    return 0


def cmd_doctor(args) -> int:
    """Run health checks on configuration and processor."""
    issues = []

    config_file = Path(args.config)
    if not config_file.exists():
        console.print(f"[yellow]No config file at {config_file}, inline defaults apply[/yellow]")

    try:
        settings = get_settings(args)
    except ConfigurationError as e:
        issues.append(str(e))
        settings = None

    if settings is not None:
        try:
            processor = resolve_processor(settings.processor)
        except ProcessorNotFound as e:
            issues.append(str(e))
            processor = None

        definition = settings.node_schema.primary
        if processor is not None:
            # Dry run with sample values to check the output arity
            sample = {f.name: f"sample-{f.name}" for f in definition.inputs}
            try:
                NodeExecutor(definition, processor).execute(sample)
            except ProcessingContractError as e:
                issues.append(str(e))
            except Exception as e:
                issues.append(f"Processor '{settings.processor}' raised on sample input: {e!r}")

    if not Path(args.credentials).exists():
        console.print("[yellow]No stored credentials, placeholder will be used for login[/yellow]")

    if issues:
        console.print(f"[red]Found {len(issues)} issue(s):[/red]")
        for i, issue in enumerate(issues, 1):
            console.print(f"  {i}. {issue}")
        return 1

    console.print(f"[green]All checks passed.[/green] Service {settings.service.name}, processor '{settings.processor}'")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Workflow Node Service Manager")
    parser.add_argument("--config", default=str(NODE_CONFIG_FILE), help="Node config YAML file")
    parser.add_argument("--credentials", default=str(CREDENTIALS_FILE), help="Credentials JSON file")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("register", help="Register this service with the orchestrator")
    subparsers.add_parser("login", help="Log in with the stored credentials")
    subparsers.add_parser("resolve", help="Print this service's orchestrator id")
    subparsers.add_parser("confirm-install", help="Confirm installation of this service")

    credentials_parser = subparsers.add_parser("credentials", help="Manage stored credentials")
    credentials_sub = credentials_parser.add_subparsers(dest="credentials_command")
    credentials_sub.add_parser("show", help="Show stored credentials")
    set_parser = credentials_sub.add_parser("set", help="Store new credentials")
    set_parser.add_argument("name", help="Orchestrator account")
    set_parser.add_argument("password", help="Orchestrator password")

    subparsers.add_parser("schema", help="Print the node interface schema")
    subparsers.add_parser("doctor", help="Run health checks")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "register": cmd_register,
        "login": cmd_login,
        "resolve": cmd_resolve,
        "confirm-install": cmd_confirm_install,
        "schema": cmd_schema,
        "doctor": cmd_doctor,
    }

    if args.command == "credentials":
        command = {"show": cmd_credentials_show, "set": cmd_credentials_set}.get(
            args.credentials_command, cmd_credentials_show
        )
    else:
        command = commands[args.command]

    try:
        code = command(args)
    except (OrchestratorError, ConfigurationError) as e:
        console.print(f"[red]{type(e).__name__}: {e}[/red]")
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
