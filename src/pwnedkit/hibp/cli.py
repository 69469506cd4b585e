"""
CLI commands for the Have I Been Pwned API.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, TextIO

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn

from pwnedkit.errors import ConfigError, HIBPError
from pwnedkit.hibp.client import HIBPClient
from pwnedkit.hibp.config import ClientConfig
from pwnedkit.hibp.hashing import HashMode
from pwnedkit.hibp.models import Breach, Match, RiskLevel
from pwnedkit.hibp.passwords import PwnedPasswordOptions

console = Console()

API_KEY_URL = "https://haveibeenpwned.com/API/Key"


def risk_color(risk: RiskLevel) -> str:
    """Rich style for a risk level."""
    return {
        RiskLevel.SAFE: "green",
        RiskLevel.LOW: "yellow",
        RiskLevel.MEDIUM: "orange3",
        RiskLevel.HIGH: "red",
        RiskLevel.CRITICAL: "bold red",
    }.get(risk, "white")


def get_config(ctx: click.Context) -> ClientConfig:
    """Client configuration stored on the click context."""
    ctx.ensure_object(dict)
    if "config" not in ctx.obj:
        try:
            ctx.obj["config"] = ClientConfig.from_env()
        except ConfigError as e:
            console.print(f"[red]Configuration error: {e}[/red]")
            raise SystemExit(1)
    return ctx.obj["config"]


def run_client(
    ctx: click.Context,
    call: Callable[[HIBPClient], Awaitable[Any]],
    description: str,
    **client_kwargs,
) -> Any:
    """Run one API call with a spinner, exiting 1 on HIBP errors."""
    config = get_config(ctx)

    async def _run():
        async with HIBPClient(config, **client_kwargs) as client:
            return await call(client)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(description, total=None)
            return asyncio.run(_run())
    except HIBPError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)


def require_api_key(ctx: click.Context, api_key: str | None) -> None:
    config = get_config(ctx)
    if api_key:
        config.api_key = api_key
    if not config.api_key:
        console.print("[red]This lookup needs an HIBP API key (HIBP_API_KEY or --api-key)[/red]")
        console.print(f"Keys are issued at {API_KEY_URL}")
        raise SystemExit(1)


def print_json(data: Any) -> None:
    console.print(json.dumps(data, indent=2, default=str))


def format_date(value, fmt: str = "%Y-%m-%d") -> str:
    return value.strftime(fmt) if value else "-"


def print_match(match: Match) -> None:
    color = risk_color(match.risk_level)
    level = f"[{color}]{match.risk_level.value.upper()}[/{color}]"

    if match.present:
        body = (
            f"[red]Pwned.[/red] Seen [bold]{match.count:,}[/bold] times in breach corpora.\n"
            f"Risk: {level}\n\n{match.risk_description}"
        )
    else:
        body = f"[green]Not pwned.[/green] The hash is not in the range response.\nRisk: {level}"

    console.print(Panel(body, title="Pwned Passwords"))


def print_breach(breach: Breach) -> None:
    flags = [
        label
        for label, on in (
            ("[green]verified[/green]", breach.is_verified),
            ("[yellow]fabricated[/yellow]", breach.is_fabricated),
            ("[red]sensitive[/red]", breach.is_sensitive),
            ("[dim]retired[/dim]", breach.is_retired),
            ("[yellow]spam list[/yellow]", breach.is_spam_list),
            ("[red]malware[/red]", breach.is_malware),
        )
        if on
    ]

    description = breach.description
    if len(description) > 500:
        description = description[:500] + "..."

    console.print(Panel(
        f"[bold]{breach.title or breach.name}[/bold] ({breach.domain or 'no domain'})\n\n"
        f"Breached: [yellow]{format_date(breach.breach_date)}[/yellow]   "
        f"Added: {format_date(breach.added_date)}\n"
        f"Accounts: [red]{breach.pwn_count:,}[/red]\n"
        f"Flags: {', '.join(flags) or '-'}\n"
        f"Data: {', '.join(breach.data_classes) or '-'}\n\n"
        f"{description}",
        title=breach.name,
    ))


@click.group()
@click.pass_context
def hibp(ctx: click.Context) -> None:
    """Have I Been Pwned lookups.

    Password checks use the k-anonymity range API: only the first five
    characters of the hash leave this machine, and no API key is needed.

    Account, paste, domain and subscription lookups need an API key in
    HIBP_API_KEY (or --api-key).
    """
    ctx.ensure_object(dict)
    ctx.obj["console"] = console


# =============================================================================
# Pwned Passwords
# =============================================================================

@hibp.command("password")
@click.option("--password", "-p", help="Password to check (prompted for when omitted)")
@click.option("--hash", "password_hash", help="Check a SHA-1 hash (NTLM with --ntlm) instead")
@click.option("--ntlm", is_flag=True, help="Query NTLM hashes instead of SHA-1")
@click.option("--padding", is_flag=True, help="Ask the API to pad the range response")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def check_password(
    ctx: click.Context,
    password: str | None,
    password_hash: str | None,
    ntlm: bool,
    padding: bool,
    json_output: bool,
) -> None:
    """Check one password (or hash) against Pwned Passwords.

    Example:
        pwnedkit hibp password
        pwnedkit hibp password --hash A94A8FE5CCB19BA61C4C0873D391E987982FBBD3
    """
    if password_hash is None and not password:
        password = click.prompt("Password", hide_input=True)

    config = get_config(ctx)
    options = PwnedPasswordOptions(
        hash_mode=HashMode.NTLM if ntlm else config.hash_mode,
        with_padding=padding or config.with_padding,
    )

    async def _check(client: HIBPClient) -> Match:
        if password_hash is None:
            return await client.passwords.check_password(password)
        if ntlm:
            return await client.passwords.check_ntlm(password_hash)
        return await client.passwords.check_sha1(password_hash)

    match = run_client(ctx, _check, "Querying range API...", password_options=options)

    if json_output:
        print_json(match.to_dict())
    else:
        print_match(match)


@hibp.command("passwords")
@click.argument("source", type=click.File("r"))
@click.option("--hashes", is_flag=True, help="Lines are hashes, not passwords")
@click.option("--ntlm", is_flag=True, help="Query NTLM hashes instead of SHA-1")
@click.option("--output", "-o", type=click.File("w"), help="Write JSON results here")
@click.pass_context
def check_passwords_batch(
    ctx: click.Context,
    source: TextIO,
    hashes: bool,
    ntlm: bool,
    output: TextIO | None,
) -> None:
    """Check every line of SOURCE (a file, or - for stdin).

    Passwords are never echoed; results for them are labelled by line
    number.

    Example:
        pwnedkit hibp passwords leaked.txt
        pwnedkit hibp passwords hashes.txt --hashes --ntlm -o report.json
    """
    entries = [(n, line.strip()) for n, line in enumerate(source, 1) if line.strip()]
    if not entries:
        console.print("[yellow]Nothing to check[/yellow]")
        return

    config = get_config(ctx)
    options = PwnedPasswordOptions(
        hash_mode=HashMode.NTLM if ntlm else config.hash_mode,
        with_padding=config.with_padding,
    )

    async def _check_all() -> list[tuple[str, Match]]:
        results = []
        async with HIBPClient(config, password_options=options) as client:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TextColumn("{task.completed}/{task.total}"),
                console=console,
                transient=True,
            ) as progress:
                task = progress.add_task("Checking", total=len(entries))
                for line_no, entry in entries:
                    if not hashes:
                        match = await client.passwords.check_password(entry)
                    elif ntlm:
                        match = await client.passwords.check_ntlm(entry)
                    else:
                        match = await client.passwords.check_sha1(entry)
                    results.append((entry if hashes else f"line {line_no}", match))
                    progress.advance(task)
        return results

    try:
        results = asyncio.run(_check_all())
    except HIBPError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    by_level: dict[RiskLevel, int] = {}
    for _, match in results:
        by_level[match.risk_level] = by_level.get(match.risk_level, 0) + 1

    table = Table(title=f"{sum(m.present for _, m in results)} of {len(results)} pwned")
    table.add_column("Risk")
    table.add_column("Entries", justify="right")
    for level in RiskLevel:
        color = risk_color(level)
        table.add_row(f"[{color}]{level.value}[/{color}]", str(by_level.get(level, 0)))
    console.print(table)

    if output is not None:
        json.dump(
            [{"entry": label, **match.to_dict()} for label, match in results],
            output,
            indent=2,
        )
        console.print(f"[green]Wrote {len(results)} results to {output.name}[/green]")


@hibp.command("range")
@click.argument("prefix")
@click.option("--ntlm", is_flag=True, help="Query NTLM hashes instead of SHA-1")
@click.option("--padding", is_flag=True, help="Ask the API to pad the response")
@click.option("--limit", default=20, show_default=True, help="Rows to display")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def list_range(
    ctx: click.Context,
    prefix: str,
    ntlm: bool,
    padding: bool,
    limit: int,
    json_output: bool,
) -> None:
    """List every leaked hash starting with the 5 character PREFIX.

    Example:
        pwnedkit hibp range 21BD1
    """
    options = PwnedPasswordOptions(
        hash_mode=HashMode.NTLM if ntlm else HashMode.SHA1,
        with_padding=padding,
    )
    matches = run_client(
        ctx,
        lambda client: client.passwords.list_hashes_prefix(prefix),
        f"Fetching range {prefix}...",
        password_options=options,
    )

    if json_output:
        print_json([m.to_dict() for m in matches])
        return

    table = Table(title=f"{prefix.upper()}: {len(matches):,} hashes (top {limit} by count)")
    table.add_column("Hash", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Risk")

    for match in sorted(matches, key=lambda m: m.count, reverse=True)[:limit]:
        color = risk_color(match.risk_level)
        table.add_row(
            match.hash,
            f"{match.count:,}",
            f"[{color}]{match.risk_level.value}[/{color}]",
        )

    console.print(table)


# =============================================================================
# Accounts and pastes
# =============================================================================

@hibp.command("account")
@click.argument("account")
@click.option("--api-key", "-k", envvar="HIBP_API_KEY", help="HIBP API key")
@click.option("--brief", "-b", is_flag=True, help="Only fetch breach names")
@click.option("--domain", "-d", help="Only breaches of this domain")
@click.option("--verified-only", is_flag=True, help="Leave out unverified breaches")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def check_account(
    ctx: click.Context,
    account: str,
    api_key: str | None,
    brief: bool,
    domain: str | None,
    verified_only: bool,
    json_output: bool,
) -> None:
    """List the breaches ACCOUNT (email or username) appears in.

    Example:
        pwnedkit hibp account user@example.com
    """
    require_api_key(ctx, api_key)

    breaches = run_client(
        ctx,
        lambda client: client.breaches.breached_account(
            account,
            truncate=brief,
            include_unverified=not verified_only,
            domain=domain,
        ),
        f"Looking up {account}...",
    )

    if json_output:
        print_json([b.to_dict() for b in breaches])
        return

    if not breaches:
        console.print(f"[green]{account} is not in any known breach[/green]")
        return

    if brief:
        names = ", ".join(b.name for b in breaches)
        console.print(f"[red]{account} is in {len(breaches)} breach(es):[/red] {names}")
        return

    table = Table(title=f"{account}: {len(breaches)} breach(es)")
    table.add_column("Breach", style="cyan")
    table.add_column("Breached", style="yellow")
    table.add_column("Accounts", justify="right")
    table.add_column("Verified")
    table.add_column("Data")

    for breach in breaches:
        table.add_row(
            breach.title or breach.name,
            format_date(breach.breach_date),
            f"{breach.pwn_count:,}",
            "yes" if breach.is_verified else "no",
            ", ".join(breach.data_classes),
        )

    console.print(table)


@hibp.command("pastes")
@click.argument("email")
@click.option("--api-key", "-k", envvar="HIBP_API_KEY", help="HIBP API key")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def check_pastes(
    ctx: click.Context,
    email: str,
    api_key: str | None,
    json_output: bool,
) -> None:
    """List the pastes EMAIL was found in.

    Example:
        pwnedkit hibp pastes user@example.com
    """
    require_api_key(ctx, api_key)

    pastes = run_client(
        ctx,
        lambda client: client.pastes.pasted_account(email),
        f"Looking up pastes for {email}...",
    )

    if json_output:
        print_json([p.to_dict() for p in pastes])
        return

    if not pastes:
        console.print(f"[green]{email} is not in any known paste[/green]")
        return

    table = Table(title=f"{email}: {len(pastes)} paste(s)")
    table.add_column("Source", style="cyan")
    table.add_column("Id")
    table.add_column("Title")
    table.add_column("Date", style="yellow")
    table.add_column("Emails", justify="right")

    for paste in pastes:
        table.add_row(
            paste.source,
            paste.id,
            paste.title or "-",
            format_date(paste.date),
            f"{paste.email_count:,}",
        )

    console.print(table)


# =============================================================================
# Breach catalogue
# =============================================================================

@hibp.command("breaches")
@click.option("--domain", "-d", help="Only breaches of this domain")
@click.option("--top", default=50, show_default=True, help="Rows to display")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def list_breaches(
    ctx: click.Context,
    domain: str | None,
    top: int,
    json_output: bool,
) -> None:
    """List breaches in the HIBP catalogue, largest first.

    Example:
        pwnedkit hibp breaches
        pwnedkit hibp breaches --domain adobe.com
    """
    breaches = run_client(
        ctx,
        lambda client: client.breaches.breaches(domain=domain, truncate=False),
        "Fetching breaches...",
    )

    if json_output:
        print_json([b.to_dict() for b in breaches])
        return

    if not breaches:
        console.print("[yellow]No breaches[/yellow]")
        return

    total = sum(b.pwn_count for b in breaches)
    table = Table(title=f"{len(breaches)} breaches, {total:,} accounts")
    table.add_column("Name", style="cyan")
    table.add_column("Domain")
    table.add_column("Breached", style="yellow")
    table.add_column("Accounts", justify="right")

    for breach in sorted(breaches, key=lambda b: b.pwn_count, reverse=True)[:top]:
        table.add_row(
            breach.name,
            breach.domain or "-",
            format_date(breach.breach_date),
            f"{breach.pwn_count:,}",
        )

    console.print(table)


@hibp.command("breach")
@click.argument("name")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def get_breach(ctx: click.Context, name: str, json_output: bool) -> None:
    """Show one breach by NAME.

    Example:
        pwnedkit hibp breach Adobe
    """
    breach = run_client(
        ctx,
        lambda client: client.breaches.breach_by_name(name),
        f"Fetching {name}...",
    )

    if json_output:
        print_json(breach.to_dict())
    else:
        print_breach(breach)


@hibp.command("latest")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def get_latest_breach(ctx: click.Context, json_output: bool) -> None:
    """Show the most recently added breach."""
    breach = run_client(
        ctx,
        lambda client: client.breaches.latest_breach(),
        "Fetching latest breach...",
    )

    if json_output:
        print_json(breach.to_dict())
    else:
        print_breach(breach)


@hibp.command("dataclasses")
@click.pass_context
def list_data_classes(ctx: click.Context) -> None:
    """List all data classes known to HIBP."""
    classes = run_client(
        ctx,
        lambda client: client.breaches.data_classes(),
        "Fetching data classes...",
    )
    for name in classes:
        console.print(f"  - {name}")


# =============================================================================
# Subscription
# =============================================================================

@hibp.command("subscription")
@click.option("--api-key", "-k", envvar="HIBP_API_KEY", help="HIBP API key")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def show_subscription(ctx: click.Context, api_key: str | None, json_output: bool) -> None:
    """Show the subscription tied to the API key."""
    require_api_key(ctx, api_key)

    status = run_client(
        ctx,
        lambda client: client.subscription.status(),
        "Fetching subscription status...",
    )

    if json_output:
        print_json(status.to_dict())
        return

    max_accounts = status.domain_search_max_breached_accounts
    limit = f"{max_accounts:,}" if max_accounts is not None else "unlimited"
    console.print(Panel(
        f"[bold]{status.subscription_name}[/bold]\n\n"
        f"{status.description}\n\n"
        f"Subscribed until: [yellow]{format_date(status.subscribed_until, '%Y-%m-%d %H:%M')}[/yellow]\n"
        f"Rate limit: [cyan]{status.rpm}[/cyan] requests/minute\n"
        f"Domain search limit: {limit}",
        title="Subscription",
    ))


@hibp.command("domains")
@click.option("--api-key", "-k", envvar="HIBP_API_KEY", help="HIBP API key")
@click.pass_context
def list_subscribed_domains(ctx: click.Context, api_key: str | None) -> None:
    """List domains verified for domain search."""
    require_api_key(ctx, api_key)

    domains = run_client(
        ctx,
        lambda client: client.breaches.subscribed_domains(),
        "Fetching subscribed domains...",
    )

    if not domains:
        console.print("[yellow]No subscribed domains[/yellow]")
        return

    def _count(value: int | None) -> str:
        return f"{value:,}" if value is not None else "-"

    table = Table(title="Subscribed Domains")
    table.add_column("Domain", style="cyan")
    table.add_column("Breached Accounts", justify="right")
    table.add_column("Excluding Spam Lists", justify="right")
    table.add_column("Renewal", style="yellow")

    for domain in domains:
        table.add_row(
            domain.domain_name,
            _count(domain.pwn_count),
            _count(domain.pwn_count_excluding_spam_lists),
            format_date(domain.next_subscription_renewal),
        )

    console.print(table)


# =============================================================================
# Configuration
# =============================================================================

@hibp.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the effective client configuration."""
    config = get_config(ctx)
    api_key = config.api_key

    table = Table(title="pwnedkit configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row(
        "API key",
        f"[green]{api_key[:8]}...[/green]" if api_key else "[red]Not set[/red]",
    )
    table.add_row("API base URL", config.base_url)
    table.add_row("Passwords base URL", config.password_base_url)
    table.add_row("User-Agent", config.user_agent)
    table.add_row("Timeout", f"{config.timeout}s")
    table.add_row(
        "On HTTP 429",
        f"sleep, max {config.max_rate_limit_retries} retries" if config.rate_limit_sleep else "fail",
    )
    table.add_row("Hash mode", str(getattr(config.hash_mode, "value", config.hash_mode)))
    table.add_row("Padding", "on" if config.with_padding else "off")

    console.print(table)

    for problem in config.validate():
        console.print(f"[red]{problem}[/red]")

    if not api_key:
        console.print(f"\n[yellow]Set HIBP_API_KEY to enable account lookups ({API_KEY_URL})[/yellow]")
