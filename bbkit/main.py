"""bbkit CLI — all commands."""

import asyncio
import json
import logging
from typing import Annotated, Any

import httpx
import tomlkit
import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from bbkit.client import BitbucketClient
from bbkit.models import OperationContract, ValidationResult
from bbkit.service import SchemaNotFoundError, SchemaService
from bbkit.settings import CONFIG_PATH, BbkitSettings, _list_profiles, _load_toml, get_settings

app = typer.Typer(help="bbkit: validated Bitbucket Cloud + Data Center operations", no_args_is_help=True)

logger = logging.getLogger(__name__)

ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-P", help="Profile name from ~/.config/bbkit/config.toml"),
]
OperationArg = Annotated[str, typer.Argument(help="Operation id (e.g. bitbucket.pull-requests.list)")]
ParamOpt = Annotated[
    list[str] | None,
    typer.Option(
        "--param",
        "-p",
        help="key=value (string) or key:=value (JSON). Dotted keys nest: content.raw=LGTM",
    ),
]
DataOpt = Annotated[str | None, typer.Option("--data", "-d", help="Parameters as a JSON object")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# Service / client factories
# ---------------------------------------------------------------------------


def get_service() -> SchemaService:
    return SchemaService(logger=logging.getLogger("bbkit.service"))


def get_client(profile: str | None = None) -> BitbucketClient:
    return BitbucketClient(get_settings(profile=profile))


def _resolve(operation_id: str) -> OperationContract:
    try:
        return asyncio.run(get_service().get_operation(operation_id))
    except SchemaNotFoundError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        rprint("[dim]Run 'bbkit list-operations' to see available operations.[/dim]")
        raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Parameter parsing
# ---------------------------------------------------------------------------


def _assign(target: dict, keys: list[str], value: Any) -> None:
    for key in keys[:-1]:
        nested = target.setdefault(key, {})
        if not isinstance(nested, dict):
            raise typer.BadParameter(f"'{key}' is set both as a value and as an object", param_hint="--param")
        target = nested
    target[keys[-1]] = value


def parse_params(pairs: list[str] | None, data: str | None = None) -> dict[str, Any]:
    """Build a parameter object from --data and repeated --param options.

    ``key=value`` keeps value as a string (schemas coerce "42" to 42);
    ``key:=value`` parses value as JSON. --param entries override --data keys.
    """
    params: dict[str, Any] = {}
    if data:
        try:
            loaded = json.loads(data)
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"invalid JSON: {exc}", param_hint="--data") from exc
        if not isinstance(loaded, dict):
            raise typer.BadParameter("must be a JSON object", param_hint="--data")
        params.update(loaded)

    for pair in pairs or []:
        key, sep, raw = pair.partition("=")
        if not sep or not key.rstrip(":"):
            raise typer.BadParameter(f"expected key=value, got '{pair}'", param_hint="--param")
        value: Any = raw
        if key.endswith(":"):
            key = key[:-1]
            try:
                value = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise typer.BadParameter(f"invalid JSON for '{key}': {exc}", param_hint="--param") from exc
        _assign(params, key.split("."), value)
    return params


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _property_type(prop: dict) -> str:
    if "anyOf" in prop:
        options = [p for p in prop["anyOf"] if p.get("type") != "null"]
        return " | ".join(_property_type(p) for p in options) or "null"
    if "enum" in prop:
        return " | ".join(json.dumps(v) for v in prop["enum"])
    if "const" in prop:
        return json.dumps(prop["const"])
    if "$ref" in prop:
        return prop["$ref"].rsplit("/", 1)[-1]
    if prop.get("type") == "array":
        return f"array of {_property_type(prop.get('items', {}))}"
    return prop.get("type", "any")


def _property_constraints(prop: dict) -> str:
    options = prop.get("anyOf", [prop])
    found = []
    for option in options:
        for key in ("minimum", "maximum", "minLength", "maxLength", "minItems"):
            if key in option:
                found.append(f"{key} {option[key]}")
    return ", ".join(found)


def render_operation(contract: OperationContract) -> str:
    """Render a markdown description of an operation and its parameters."""
    schema = contract.schema.json_schema()
    required = set(schema.get("required", []))

    lines = [
        f"# {contract.id}",
        "",
        f"**Method:** {contract.method}",
        f"**Path:** `{contract.path}`",
        f"**Platform:** {'Data Center' if contract.platform == 'datacenter' else 'Cloud'}",
        "",
        contract.description,
        "",
        "## Parameters",
        "",
    ]

    properties = schema.get("properties", {})
    if not properties:
        lines.append("_No parameters._")
        return "\n".join(lines)

    lines += ["| Name | Type | Required | Constraints |", "|---|---|---|---|"]
    for name, prop in properties.items():
        location = " (path)" if name in contract.path_params else ""
        lines.append(
            f"| {name}{location} | {_property_type(prop)} | {'yes' if name in required else 'no'} "
            f"| {_property_constraints(prop) or '—'} |"
        )
    return "\n".join(lines)


_TITLE_KEYS = ("title", "display_name", "name", "key", "slug", "uuid")


def _summarize(item: Any) -> str:
    if not isinstance(item, dict):
        return str(item)
    label = next((str(item[k]) for k in _TITLE_KEYS if item.get(k)), "")
    parts = []
    if "id" in item:
        parts.append(f"**#{item['id']}**")
    if label:
        parts.append(label)
    if item.get("state"):
        state = item["state"]
        parts.append(f"({state.get('name', state) if isinstance(state, dict) else state})")
    return " ".join(parts) or json.dumps(item)


def render_response(data: Any) -> str:
    """Render an API response as markdown: paged lists as bullets, objects as fields."""
    if data is None:
        return "_No content._"
    if isinstance(data, str):
        return f"```\n{data.rstrip()}\n```"
    if isinstance(data, list):
        return "\n".join(f"- {_summarize(item)}" for item in data) or "_No results._"

    if isinstance(data.get("values"), list):
        values = data["values"]
        lines = [f"## Results ({len(values)})", ""]
        lines += [f"- {_summarize(item)}" for item in values] or ["_No results._"]
        if data.get("next"):
            lines += ["", f"_More results: page {data.get('page', 1) + 1}_"]
        elif data.get("isLastPage") is False:
            lines += ["", f"_More results: start={data.get('nextPageStart')}_"]
        return "\n".join(lines)

    heading = next((str(data[k]) for k in _TITLE_KEYS if data.get(k)), None)
    lines = [f"# {heading}", ""] if heading else []
    for key, value in data.items():
        if key == "links" or isinstance(value, (dict, list)):
            continue
        lines.append(f"- **{key}:** {value}")
    return "\n".join(lines)


def _print_issues(result: ValidationResult) -> None:
    table = Table(title="Validation failed")
    table.add_column("Field", style="cyan")
    table.add_column("Problem")
    for issue in result.issues:
        table.add_row(escape(issue.path or "(input)"), escape(issue.message))
    rprint(table)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def matches_search(contract: OperationContract, query: str) -> bool:
    """True when every word of query appears in the operation id or description (case-insensitive)."""
    haystack = f"{contract.id} {contract.description}".lower()
    return all(word in haystack for word in query.lower().split())


async def _load_operations(service: SchemaService, ids: list[str]) -> list[OperationContract]:
    return list(await asyncio.gather(*(service.get_operation(i) for i in ids)))


@app.command("list-operations")
def list_operations(
    prefix: Annotated[str | None, typer.Option("--prefix", help="Only ids starting with this prefix")] = None,
    search: Annotated[
        str | None, typer.Option("--search", "-s", help="Words to match against ids and descriptions")
    ] = None,
    output: Annotated[str, typer.Option("--output", "-o", help="table or json")] = "table",
) -> None:
    """List known operations, optionally filtered by id prefix or search words."""
    service = get_service()
    ids = [i for i in service.list_operation_ids() if not prefix or i.startswith(prefix)]
    contracts = asyncio.run(_load_operations(service, ids))
    if search:
        contracts = [c for c in contracts if matches_search(c, search)]

    if output == "json":
        typer.echo(
            json.dumps(
                [{"id": c.id, "method": c.method, "path": c.path, "description": c.description} for c in contracts],
                indent=2,
            )
        )
        return

    table = Table(title=f"Operations ({len(contracts)})")
    table.add_column("ID", style="cyan")
    table.add_column("Method")
    table.add_column("Path", style="dim")
    for c in contracts:
        table.add_row(c.id, c.method, escape(c.path))
    rprint(table)


@app.command("describe")
def describe(
    operation_id: OperationArg,
    output: Annotated[str, typer.Option("--output", "-o", help="markdown or json")] = "markdown",
) -> None:
    """Show an operation's method, path and parameters."""
    contract = _resolve(operation_id)
    if output == "json":
        typer.echo(
            json.dumps(
                {
                    "id": contract.id,
                    "method": contract.method,
                    "path": contract.path,
                    "platform": contract.platform,
                    "description": contract.description,
                    "input_schema": contract.schema.json_schema(),
                },
                indent=2,
            )
        )
        return
    typer.echo(render_operation(contract))


@app.command("validate")
def validate(
    operation_id: OperationArg,
    param: ParamOpt = None,
    data: DataOpt = None,
    output: Annotated[str, typer.Option("--output", "-o", help="table or json")] = "table",
) -> None:
    """Validate parameters for an operation without calling the API."""
    contract = _resolve(operation_id)
    result = contract.schema.validate(parse_params(param, data))

    if output == "json":
        typer.echo(result.model_dump_json(indent=2))
    elif result.success:
        rprint(f"[green]✓[/green] Valid parameters for {contract.id}")
        typer.echo(json.dumps(result.data, indent=2))
    else:
        _print_issues(result)

    if not result.success:
        raise typer.Exit(1)


@app.command("call")
def call(
    operation_id: OperationArg,
    param: ParamOpt = None,
    data: DataOpt = None,
    profile: ProfileOpt = None,
    output: Annotated[str, typer.Option("--output", "-o", help="markdown or json")] = "json",
) -> None:
    """Validate parameters, then call the Bitbucket API."""
    contract = _resolve(operation_id)
    result = contract.schema.validate(parse_params(param, data))
    if not result.success:
        _print_issues(result)
        raise typer.Exit(1)

    client = get_client(profile)
    if client.platform != contract.platform:
        rprint(
            f"[red]{contract.id} is a {contract.platform} operation but the active profile "
            f"targets {client.platform}.[/red]"
        )
        raise typer.Exit(1)

    try:
        response = client.execute(contract, result.data or {})
    except RuntimeError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as exc:
        logger.debug("Error body: %s", exc.response.text)
        rprint(f"[red]Bitbucket API returned {exc.response.status_code} for {contract.method} {exc.request.url}[/red]")
        raise typer.Exit(1)

    if output == "markdown":
        typer.echo(render_response(response))
    elif isinstance(response, str):
        typer.echo(response)
    else:
        typer.echo(json.dumps(response, indent=2))


@app.command("set-default")
def set_default(
    profile: Annotated[str, typer.Argument(help="Profile name to set as default")],
) -> None:
    """Set the default profile in ~/.config/bbkit/config.toml."""
    if not CONFIG_PATH.exists():
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        doc = tomlkit.document()
        doc.add("default_profile", profile)
        CONFIG_PATH.write_text(tomlkit.dumps(doc))
        rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')
        return

    doc = tomlkit.load(CONFIG_PATH.open())
    profiles = _list_profiles(doc)
    if profile not in profiles:
        rprint(f"[red]Profile '{profile}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}[/red]")
        raise typer.Exit(1)

    doc["default_profile"] = profile
    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')


@app.command("config-show")
def config_show(profile: ProfileOpt = None) -> None:
    """Show resolved configuration (masks credentials)."""
    settings = get_settings(profile=profile)

    def mask(val: str | None) -> str:
        if val is None:
            return "[dim](not set)[/dim]"
        if len(val) <= 5:
            return "***"
        return f"...{val[-4:]}"

    table = Table(title="bbkit Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("platform", settings.platform)
    table.add_row("default_profile", settings.default_profile or "[dim](not set)[/dim]")
    table.add_row("api_url", settings.api_url)
    table.add_row("username", settings.username or "[dim](not set)[/dim]")
    table.add_row("app_password", mask(settings.app_password.get_secret_value() if settings.app_password else None))
    table.add_row("token", mask(settings.token.get_secret_value() if settings.token else None))
    table.add_row("timeout", f"{settings.timeout:g}s")

    rprint(table)


_VERIFY_OPERATION = {
    "cloud": ("bitbucket.users.current", {}),
    "datacenter": ("bitbucket.datacenter.projects.list", {"limit": 1}),
}


@app.command("init")
def init_cmd() -> None:
    """Interactive first-time setup wizard."""
    rprint("[bold]bbkit Setup Wizard[/bold]")
    rprint("")

    # Step 1: platform
    platform = typer.prompt("Platform? [cloud/datacenter]", default="cloud").strip().lower()
    if platform not in ("cloud", "datacenter"):
        rprint("[red]Invalid platform. Choose 'cloud' or 'datacenter'.[/red]")
        raise typer.Exit(1)

    # Step 2: profile name
    profile_name = typer.prompt("Profile name (e.g. work, personal)").strip()
    if not profile_name:
        rprint("[red]Profile name cannot be empty.[/red]")
        raise typer.Exit(1)

    profile_config: dict = {"platform": platform}

    # Step 3: server URL (Data Center only)
    if platform == "datacenter":
        base_url = typer.prompt("Bitbucket server URL (e.g. https://bitbucket.example.com)").strip()
        if not base_url.startswith(("https://", "http://")):
            rprint("[red]Server URL must start with https:// or http://[/red]")
            raise typer.Exit(1)
        profile_config["base_url"] = base_url.rstrip("/")

    # Step 4: auth
    auth_method = (
        typer.prompt("Authenticate with an app password or an access token? [app-password/token]", default="token")
        .strip()
        .lower()
    )
    if auth_method == "app-password":
        profile_config["username"] = typer.prompt("Username").strip()
        profile_config["app_password"] = typer.prompt("App password", hide_input=True).strip()
    elif auth_method == "token":
        profile_config["token"] = typer.prompt("Paste token", hide_input=True).strip()
    else:
        rprint("[red]Invalid auth method. Choose 'app-password' or 'token'.[/red]")
        raise typer.Exit(1)

    # Step 5: verify
    if typer.confirm("Call the API to confirm the credentials work?", default=True):
        operation_id, payload = _VERIFY_OPERATION[platform]
        try:
            client = BitbucketClient(BbkitSettings(**profile_config))
            client.execute(_resolve(operation_id), payload)
            rprint("[green]✓[/green] Connected.")
        except Exception as exc:
            rprint(f"[yellow]Warning:[/yellow] Could not verify credentials: {escape(str(exc))}")

    # Step 6: set as default?
    set_as_default = typer.confirm(f"Set '{profile_name}' as default profile?", default=True)

    # Step 7: write config (round-trip preserves any existing comments)
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    doc = tomlkit.load(CONFIG_PATH.open()) if CONFIG_PATH.exists() else tomlkit.document()

    doc[profile_name] = profile_config
    if set_as_default:
        doc["default_profile"] = profile_name

    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    _load_toml.cache_clear()
    rprint(f"[green]✓[/green] Profile '{profile_name}' written to {CONFIG_PATH}")

    rprint("")
    config_show(profile=profile_name)
