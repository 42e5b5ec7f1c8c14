import asyncio
import datetime
import logging
from typing import Optional

import typer
from fastapi import HTTPException
from pydantic import ValidationError
from tortoise import Tortoise

from ..core.config import DEFAULT_REPORT_PERIOD, TORTOISE_ORM_CONFIG
from ..core.logging_config import configure_logging
from ..features.auth.schemas import UserCreate
from ..features.auth.security import get_password_hash
from ..features.auth.service import ADMIN_ROLE, create_user
from ..features.reports.formatting import (
    format_currency, format_date, format_percent, get_period_label,
)
from ..features.reports.periods import ReportPeriod
from ..features.reports.schemas import ReportData
from ..features.reports.service import generate_report

app = typer.Typer(name="webshop-cli", help="CLI for managing webshop data and reports.")


class DBConnection:
    """Connects Tortoise for the duration of one command."""

    async def __aenter__(self):
        await Tortoise.init(config=TORTOISE_ORM_CONFIG)
        await Tortoise.generate_schemas(safe=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await Tortoise.close_connections()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level.")):
    app_logger = configure_logging()
    if verbose:
        app_logger.setLevel(logging.DEBUG)


# User management commands
user_app = typer.Typer(name="users", help="Manage user accounts.")
app.add_typer(user_app)

@user_app.command("create-admin")
def create_admin_user_command(
    username: str = typer.Option(..., prompt=True, help="Username for the new admin."),
    email: str = typer.Option(..., prompt=True, help="Email for the new admin."),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password for the new admin."),
    name: Optional[str] = typer.Option(None, help="Display name."),
):
    """Creates a new admin user."""
    try:
        user_in = UserCreate(username=username, email=email, password=password, name=name)
    except ValidationError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    asyncio.run(_create_admin_user(user_in))

async def _create_admin_user(user_in: UserCreate):
    async with DBConnection():
        try:
            admin_user = await create_user(user_in, get_password_hash(user_in.password), role=ADMIN_ROLE)
        except HTTPException as e:
            typer.secho(f"Error: {e.detail}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
    typer.secho(f"Admin user '{admin_user.username}' created with ID: {admin_user.public_id}", fg=typer.colors.GREEN)


# Report commands
report_app = typer.Typer(name="reports", help="Business reports.")
app.add_typer(report_app)

@report_app.command("generate")
def generate_report_command(
    period: ReportPeriod = typer.Option(ReportPeriod(DEFAULT_REPORT_PERIOD), help="Report period."),
    date: Optional[datetime.datetime] = typer.Option(
        None, formats=["%Y-%m-%d"], help="Day the report ends on, defaults to today (UTC)."
    ),
    summary: bool = typer.Option(False, "--summary", help="Print a short summary instead of JSON."),
):
    """Generates a report against the configured database and prints it."""
    report = asyncio.run(_generate_report(period, date.date() if date else None))
    if summary:
        typer.echo(render_summary(report))
    else:
        typer.echo(report.model_dump_json(by_alias=True, indent=2))

async def _generate_report(period: ReportPeriod, reference_date: Optional[datetime.date]) -> ReportData:
    async with DBConnection():
        return await generate_report(period, reference_date)


def render_summary(report: ReportData) -> str:
    """A few headline figures, formatted the way the dashboard shows them."""
    revenue, orders = report.revenue, report.orders
    lines = [
        f"{get_period_label(report.period)} riport: {format_date(report.start_date)} - {format_date(report.end_date)}",
        f"Bevétel: {format_currency(revenue.total)} ({format_percent(revenue.change)})",
        f"Rendelések: {orders.total} ({format_percent(orders.change)}), "
        f"átlag {format_currency(orders.average_value)}, teljesítve {format_percent(orders.completed_rate)}",
        f"Lemondva: {orders.cancelled} ({format_currency(orders.cancelled_value)})",
        f"Új felhasználók: {report.users.new}, aktív: {report.users.active}",
        f"Készlethiány: {report.products.out_of_stock}, alacsony készlet: {len(report.products.low_stock)}",
    ]
    for product in report.products.top_selling[:3]:
        lines.append(f"  {product.name}: {product.quantity} db, {format_currency(product.revenue)}")
    return "\n".join(lines)


if __name__ == "__main__":
    app()
