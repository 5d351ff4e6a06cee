"""CLI for the user table demo app.

Commands::

    uv run demo                    # Run the Reflex demo app
    uv run demo run                # Same as above
    uv run demo generate-users     # Write a sample data/users.json (120 users)
"""

import json
import os
import random
from pathlib import Path
from typing import Annotated, Any

import typer

app = typer.Typer(
    name="demo",
    help="User table demo app.",
    invoke_without_command=True,
)

DATA_DIR: Path = Path(__file__).resolve().parent / "data"
USERS_PATH: Path = DATA_DIR / "users.json"

_FIRST_NAMES: list[str] = [
    "Alice", "Bob", "Charlie", "Diana", "Eve", "Frank", "Grace", "Hank",
    "Ivy", "Jack", "Karen", "Leo", "Mona", "Nick", "Olivia", "Paul",
]
_LAST_NAMES: list[str] = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
]
_CITIES: list[str] = [
    "Gwenborough", "Wisokyburgh", "McKenziehaven", "South Elvis", "Roscoeview",
    "South Christy", "Howemouth", "Aliyaview", "Bartholomebury", "Lebsackbury",
]
_COMPANIES: list[str] = [
    "Romaguera-Crona", "Deckow-Crist", "Robel-Corkery", "Keebler LLC",
    "Considine-Lockman", "Johns Group", "Abernathy Group", "Yost and Sons",
]


def _sample_user(index: int, rng: random.Random) -> dict[str, Any]:
    first = rng.choice(_FIRST_NAMES)
    last = rng.choice(_LAST_NAMES)
    return {
        "id": index + 1,
        "name": f"{first} {last}",
        "username": f"{first.lower()}{index + 1}",
        "email": f"{first.lower()}.{last.lower()}@example.com",
        "phone": f"{rng.randint(200, 999)}.{rng.randint(100, 999)}.{rng.randint(1000, 9999)}",
        "address": {"street": f"{rng.randint(1, 999)} Main St", "city": rng.choice(_CITIES)},
        "company": {"name": rng.choice(_COMPANIES)},
    }


def _break_user(user: dict[str, Any], rng: random.Random) -> dict[str, Any]:
    """Introduce one data problem: a validation failure or a phone too short to format."""
    problem = rng.choice(["numeric_name", "bad_email", "no_city", "no_company", "short_phone"])
    if problem == "numeric_name":
        user["name"] = str(rng.randint(10000, 99999))
    elif problem == "bad_email":
        user["email"] = user["email"].replace("@", " at ")
    elif problem == "no_city":
        user["address"].pop("city")
    elif problem == "no_company":
        user.pop("company")
    else:
        user["phone"] = str(rng.randint(100, 99999))
    return user


def _run_app() -> None:
    """Start the Reflex demo app."""
    app_dir = Path(__file__).resolve().parent.parent
    os.chdir(app_dir)

    from reflex.reflex import cli

    cli(["run"])


@app.callback(invoke_without_command=True)
def default(ctx: typer.Context) -> None:
    """Run the demo app (default when no subcommand is given)."""
    if ctx.invoked_subcommand is None:
        _run_app()


@app.command()
def run() -> None:
    """Run the Reflex demo app."""
    _run_app()


@app.command()
def generate_users(
    count: Annotated[int, typer.Option("--count", "-n", help="Number of users to write")] = 120,
    invalid_every: Annotated[int, typer.Option("--invalid-every", help="Break every Nth user (0 = none)")] = 7,
    seed: Annotated[int, typer.Option("--seed", help="Random seed")] = 42,
) -> None:
    """Write a sample users file to the demo's data/ directory."""
    rng = random.Random(seed)
    users = []
    for index in range(count):
        user = _sample_user(index, rng)
        if invalid_every > 0 and (index + 1) % invalid_every == 0:
            user = _break_user(user, rng)
        users.append(user)

    DATA_DIR.mkdir(parents=True, exist_ok=True)
    USERS_PATH.write_text(json.dumps(users, indent=2))
    typer.echo(f"Wrote {count} users to {USERS_PATH}")
    typer.echo("Run the demo with: uv run demo")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
