"""CLI entry point for crev-trust.

Invoked as::

    crev-trust [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m crev_trust.cli.main

Commands
--------
id new            Generate a local identity
id show           Show the local identity
trust             Trust other identities
distrust          Distrust other identities
review            Positively review a crate
flag              Flag a crate as buggy, low-quality, or dangerous
fetch             Ingest proofs from files or directories
list-trusted-ids  List identities within the trust budget
list-reviews      List reviews and flags for a crate
verify            Verify crates against the trust graph
"""
from __future__ import annotations

import base64
import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from crev_trust import __version__
from crev_trust.crypto.signature import Ed25519SignatureVerifier
from crev_trust.engine import RootIdentityError, TrustEngine
from crev_trust.identity import Identity
from crev_trust.proofs.levels import Rating, ReviewLevel, TrustLevel, parse_trust_level
from crev_trust.proofs.proof import Proof, ProofKind
from crev_trust.proofs.review import ReviewOutcome
from crev_trust.proofs.selector import CrateSelector
from crev_trust.proofs.signer import ProofSigner
from crev_trust.sources import FileProofSource, ProofSource
from crev_trust.store.repository import JsonlProofRepository
from crev_trust.trust.params import TrustDistanceParams
from crev_trust.verification.verdict import VerdictKind

console = Console()

DEFAULT_HOME = Path.home() / ".crev-trust"
ID_FILE = "id.json"
PROOFS_FILE = "proofs.jsonl"

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@dataclass
class CliState:
    """Per-invocation settings shared with subcommands."""

    home: Path

    @property
    def id_file(self) -> Path:
        return self.home / ID_FILE

    @property
    def repository(self) -> JsonlProofRepository:
        return JsonlProofRepository(self.home / PROOFS_FILE)


pass_state = click.make_pass_decorator(CliState)


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="crev-trust")
@click.option(
    "--home",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="CREV_TRUST_HOME",
    default=None,
    help="Directory holding the local identity and proof log.",
)
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity.",
)
@click.pass_context
def cli(ctx: click.Context, home: Path | None, log_level: str) -> None:
    """Distributed code review: trust graph distance and proof verification"""
    logging.basicConfig(level=getattr(logging, log_level.upper()))
    ctx.obj = CliState(home=home if home is not None else DEFAULT_HOME)


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    console.print(f"[bold]crev-trust[/bold] v{__version__}")


# ------------------------------------------------------------------
# Shared options
# ------------------------------------------------------------------


def trust_params_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the --depth / --*-cost options shared by trust-aware commands."""
    options = [
        click.option(
            "--depth",
            type=click.IntRange(min=0),
            default=10,
            show_default=True,
            help="Maximum cumulative trust cost considered reachable.",
        ),
        click.option(
            "--high-cost",
            type=click.IntRange(min=0),
            default=0,
            show_default=True,
            help="Cost of a high-trust edge.",
        ),
        click.option(
            "--medium-cost",
            type=click.IntRange(min=0),
            default=1,
            show_default=True,
            help="Cost of a medium-trust edge.",
        ),
        click.option(
            "--low-cost",
            type=click.IntRange(min=0),
            default=5,
            show_default=True,
            help="Cost of a low-trust edge.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _params(depth: int, high_cost: int, medium_cost: int, low_cost: int) -> TrustDistanceParams:
    return TrustDistanceParams.from_depth(
        depth=depth, high_cost=high_cost, medium_cost=medium_cost, low_cost=low_cost
    )


def _selector(name: str | None, version: str | None) -> CrateSelector:
    try:
        return CrateSelector(name=name, version=version)
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)


# ------------------------------------------------------------------
# id command group
# ------------------------------------------------------------------


@cli.group(name="id")
def id_group() -> None:
    """Manage the local identity."""


@id_group.command(name="new")
@click.option("--name", "-n", default=None, help="Display name attached to proofs.")
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing identity.")
@pass_state
def id_new_command(state: CliState, name: str | None, force: bool) -> None:
    """Generate a new local identity."""
    if state.id_file.exists() and not force:
        console.print(
            f"[red]Error:[/red] An identity already exists at {state.id_file}. "
            "Use --force to replace it."
        )
        sys.exit(1)

    signer = ProofSigner.generate(display_name=name)
    _save_signer(signer, state.id_file)

    console.print("[green]Created[/green] identity")
    console.print(f"  ID:   [bold]{signer.identity.id}[/bold]")
    console.print(f"  Name: {signer.identity.display_name or '(none)'}")


@id_group.command(name="show")
@pass_state
def id_show_command(state: CliState) -> None:
    """Show the local identity."""
    signer = _require_signer(state)
    console.print(f"  ID:   [bold]{signer.identity.id}[/bold]")
    console.print(f"  Name: {signer.identity.display_name or '(none)'}")


# ------------------------------------------------------------------
# Issuing proofs
# ------------------------------------------------------------------


@cli.command(name="trust")
@click.argument("pub_ids", nargs=-1, required=True)
@click.option(
    "--level",
    "-l",
    type=click.Choice([level.label for level in TrustLevel], case_sensitive=False),
    default="medium",
    show_default=True,
    help="Trust level to declare.",
)
@pass_state
def trust_command(state: CliState, pub_ids: tuple[str, ...], level: str) -> None:
    """Create trust proofs for PUB_IDS."""
    signer = _require_signer(state)
    trust_level = parse_trust_level(level)
    proofs = [signer.trust(Identity(pub_id), trust_level) for pub_id in pub_ids]
    _record(state, proofs)


@cli.command(name="distrust")
@click.argument("pub_ids", nargs=-1, required=True)
@pass_state
def distrust_command(state: CliState, pub_ids: tuple[str, ...]) -> None:
    """Create distrust proofs for PUB_IDS."""
    signer = _require_signer(state)
    proofs = [signer.distrust(Identity(pub_id)) for pub_id in pub_ids]
    _record(state, proofs)


@cli.command(name="review")
@click.argument("name")
@click.argument("version", required=False)
@click.option(
    "--rating",
    type=click.Choice([r.value for r in Rating], case_sensitive=False),
    default=Rating.POSITIVE.value,
    show_default=True,
)
@click.option(
    "--thoroughness",
    type=click.Choice([r.value for r in ReviewLevel], case_sensitive=False),
    default=ReviewLevel.LOW.value,
    show_default=True,
)
@click.option(
    "--understanding",
    type=click.Choice([r.value for r in ReviewLevel], case_sensitive=False),
    default=ReviewLevel.MEDIUM.value,
    show_default=True,
)
@click.option("--comment", "-m", default="", help="Review notes.")
@pass_state
def review_command(
    state: CliState,
    name: str,
    version: str | None,
    rating: str,
    thoroughness: str,
    understanding: str,
    comment: str,
) -> None:
    """Review crate NAME, optionally at VERSION."""
    signer = _require_signer(state)
    outcome = ReviewOutcome(
        rating=Rating(rating.lower()),
        thoroughness=ReviewLevel(thoroughness.lower()),
        understanding=ReviewLevel(understanding.lower()),
        comment=comment,
    )
    _record(state, [signer.review(_selector(name, version), outcome)])


@cli.command(name="flag")
@click.argument("name")
@click.argument("version", required=False)
@click.option("--comment", "-m", default="", help="Why the crate is flagged.")
@pass_state
def flag_command(state: CliState, name: str, version: str | None, comment: str) -> None:
    """Flag crate NAME, optionally at VERSION, as buggy, low-quality, or dangerous."""
    signer = _require_signer(state)
    _record(state, [signer.flag(_selector(name, version), comment)])


# ------------------------------------------------------------------
# fetch
# ------------------------------------------------------------------


@cli.command(name="fetch")
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option(
    "--timeout",
    type=float,
    default=30.0,
    show_default=True,
    help="Seconds to wait for all sources.",
)
@pass_state
def fetch_command(state: CliState, paths: tuple[Path, ...], timeout: float) -> None:
    """Ingest proofs from files or directories at PATHS into the local log."""
    engine, repository = _open_engine(state)
    sources: list[ProofSource] = [FileProofSource(path) for path in paths]
    report = engine.fetch(sources, timeout=timeout)
    repository.extend(report.accepted)

    for name, error in sorted(report.failed_sources.items()):
        console.print(f"  [yellow]SKIP[/yellow]  {name}: {error}")
    for rejection in report.rejected:
        console.print(
            f"  [red]REJECT[/red]  {rejection.source}#{rejection.index} "
            f"({rejection.reason.value}): {rejection.detail}"
        )
    console.print(
        f"\nAccepted: [bold]{report.accepted_count}[/bold]  "
        f"Duplicates: {report.duplicates}  Rejected: {report.rejected_count}"
    )
    if len(report.failed_sources) == len(sources):
        sys.exit(1)


# ------------------------------------------------------------------
# Queries
# ------------------------------------------------------------------


@cli.command(name="list-trusted-ids")
@trust_params_options
@pass_state
def list_trusted_ids_command(
    state: CliState, depth: int, high_cost: int, medium_cost: int, low_cost: int
) -> None:
    """List identities within the trust budget."""
    engine, _ = _open_engine(state)
    try:
        distances = engine.compute_trust(_params(depth, high_cost, medium_cost, low_cost))
    except RootIdentityError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    table = Table(title="Trusted Identities", show_header=True)
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Distance", justify="right")
    table.add_column("Hops", justify="right")
    for row in distances.to_rows():
        table.add_row(str(row["id"]), str(row["name"]), str(row["distance"]), str(row["hops"]))
    console.print(table)
    console.print(f"\nTotal: {len(distances)} identit{'y' if len(distances) == 1 else 'ies'}")


@cli.command(name="list-reviews")
@click.argument("name", required=False)
@click.argument("version", required=False)
@pass_state
def list_reviews_command(state: CliState, name: str | None, version: str | None) -> None:
    """List reviews and flags for crate NAME at VERSION (all crates when omitted)."""
    engine, _ = _open_engine(state)
    proofs = engine.store.proofs_about(_selector(name, version))
    if not proofs:
        console.print("[yellow]No reviews found matching your criteria.[/yellow]")
        return

    table = Table(title="Reviews", show_header=True)
    table.add_column("Crate", style="cyan")
    table.add_column("Kind")
    table.add_column("Rating")
    table.add_column("Issuer")
    table.add_column("Date")
    for proof in proofs:
        kind = "[red]flag[/red]" if proof.kind is ProofKind.FLAG else "review"
        rating = proof.outcome.rating.value if proof.outcome is not None else "-"
        table.add_row(
            str(proof.crate), kind, rating, proof.issuer.label(), proof.date.isoformat()
        )
    console.print(table)


@cli.command(name="verify")
@click.argument("selectors", nargs=-1, required=True)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show supporting evidence.")
@click.option(
    "--min-reviews",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Reviewers required before a trusted crate is reported as passing.",
)
@trust_params_options
@pass_state
def verify_command(
    state: CliState,
    selectors: tuple[str, ...],
    verbose: bool,
    min_reviews: int,
    depth: int,
    high_cost: int,
    medium_cost: int,
    low_cost: int,
) -> None:
    """Verify crates given as NAME or NAME@VERSION.

    Exits with status 1 if any crate is flagged by a trusted identity.
    """
    try:
        parsed = [CrateSelector.parse(text) for text in selectors]
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    engine, _ = _open_engine(state)
    try:
        distances = engine.compute_trust(_params(depth, high_cost, medium_cost, low_cost))
    except RootIdentityError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)
    verdicts = engine.verify_many(parsed, distances)

    table = Table(title="Verification", show_header=True)
    table.add_column("Crate", style="cyan")
    table.add_column("Verdict")
    table.add_column("Identities", justify="right")
    table.add_column("Closest", justify="right")
    table.add_column("Pass", justify="center")
    styles = {
        VerdictKind.TRUSTED: "[green]trusted[/green]",
        VerdictKind.UNKNOWN: "[yellow]unknown[/yellow]",
        VerdictKind.FLAGGED: "[red]flagged[/red]",
    }
    for selector, verdict in verdicts.items():
        closest = verdict.closest_distance
        table.add_row(
            str(selector),
            styles[verdict.kind],
            str(len(verdict.evidence)),
            "-" if closest is None else str(closest),
            "[green]Yes[/green]" if verdict.meets(min_reviews=min_reviews) else "[red]No[/red]",
        )
    console.print(table)

    if verbose:
        for selector, verdict in verdicts.items():
            for item in verdict.evidence:
                console.print(
                    f"  {selector}: {item.proof.kind.value} by "
                    f"[bold]{item.identity.label()}[/bold] (distance {item.distance})"
                )

    if any(verdict.is_flagged for verdict in verdicts.values()):
        sys.exit(1)


# ------------------------------------------------------------------
# Helpers — local identity and proof log persistence for CLI use
# ------------------------------------------------------------------


def _load_signer(id_file: Path) -> ProofSigner | None:
    """Return the local ProofSigner stored in *id_file*, or None if absent."""
    if not id_file.exists():
        return None
    try:
        data: dict[str, object] = json.loads(id_file.read_text(encoding="utf-8"))
        private_key = base64.urlsafe_b64decode(str(data["private_key"]).encode("ascii"))
        name = data.get("display_name")
        return ProofSigner(private_key, display_name=str(name) if name else None)
    except (OSError, KeyError, ValueError) as exc:
        console.print(f"[red]Error:[/red] Could not load identity file {id_file}: {exc}")
        sys.exit(1)


def _save_signer(signer: ProofSigner, id_file: Path) -> None:
    """Persist the signer's identity and private key as JSON."""
    id_file.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "id": signer.identity.id,
        "display_name": signer.identity.display_name,
        "private_key": base64.urlsafe_b64encode(signer.private_key).decode("ascii"),
    }
    id_file.write_text(json.dumps(data, indent=2), encoding="utf-8")
    id_file.chmod(0o600)


def _require_signer(state: CliState) -> ProofSigner:
    signer = _load_signer(state.id_file)
    if signer is None:
        console.print(
            "[red]Error:[/red] No local identity found. Run 'crev-trust id new' first."
        )
        sys.exit(1)
    return signer


def _open_engine(state: CliState) -> tuple[TrustEngine, JsonlProofRepository]:
    """Build an engine rooted at the local identity and load the local proof log."""
    signer = _load_signer(state.id_file)
    repository = state.repository
    engine = TrustEngine(
        root=signer.identity if signer is not None else None,
        verifier=Ed25519SignatureVerifier(),
    )
    try:
        records = repository.load_records()
    except OSError as exc:
        console.print(f"[red]Error:[/red] Could not read proof log {repository.path}: {exc}")
        sys.exit(1)

    report = engine.ingest(records, source=str(repository.path))
    if report.rejected:
        console.print(
            f"[yellow]Warning:[/yellow] {report.rejected_count} record(s) in "
            f"{repository.path} were rejected."
        )
    return engine, repository


def _record(state: CliState, proofs: list[Proof]) -> None:
    """Append freshly signed proofs to the local log and echo them."""
    state.repository.extend(proofs)
    for proof in proofs:
        console.print(f"[green]Recorded[/green] {proof.describe()}")


if __name__ == "__main__":
    cli()
