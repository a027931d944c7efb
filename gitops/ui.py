"""Operator-facing output."""

from collections.abc import Iterable

import click


def step(text: str) -> None:
    click.echo(text)


def info(text: str) -> None:
    click.echo(f"ℹ️  {text}")


def success(text: str) -> None:
    click.secho(f"✅ {text}", fg="green")


def done(text: str) -> None:
    click.secho(f"🎉 {text}", fg="green")


def warn(text: str) -> None:
    click.secho(f"⚠️  {text}", fg="yellow", err=True)


def fail(text: str, hint: str | None = None) -> None:
    click.secho(f"❌ Error: {text}", fg="red", err=True)
    if hint:
        click.echo(f"💡 {hint}", err=True)


def bullet_list(items: Iterable[str], marker: str = "•") -> None:
    for item in items:
        click.echo(f"   {marker} {item}")


def highlight(text: str) -> str:
    return click.style(text, fg="magenta")
