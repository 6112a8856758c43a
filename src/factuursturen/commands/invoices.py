"""Invoice commands -- ``factuursturen invoices ...``."""

from __future__ import annotations

import typer

from factuursturen.client import FactuurSturenClient
from factuursturen.commands import run_with_client
from factuursturen.exceptions import NotFoundError
from factuursturen.models import Invoice
from factuursturen.output import format_response, print_table

invoices_app = typer.Typer(no_args_is_help=True)


@invoices_app.command("list")
def invoices_list(ctx: typer.Context) -> None:
    """List invoices with their totals and open amounts."""
    invoices = run_with_client(ctx, lambda client: client.get_invoices())
    rows = [
        [
            inv.invoice_nr or "",
            inv.company or "",
            f"{inv.total_in_tax:.2f}",
            f"{inv.open:.2f}",
            inv.due_date.isoformat() if inv.due_date else "",
        ]
        for inv in invoices
    ]
    print_table(["invoicenr", "company", "total", "open", "duedate"], rows, title="Invoices")


@invoices_app.command("get")
def invoices_get(
    ctx: typer.Context,
    invoice_nr: str = typer.Argument(help="Invoice number."),
) -> None:
    """Show one invoice."""

    async def _get(client: FactuurSturenClient) -> Invoice:
        invoice = await client.get_invoice(invoice_nr)
        if invoice is None:
            raise NotFoundError(f"Invoice {invoice_nr} not found")
        return invoice

    invoice = run_with_client(ctx, _get)
    format_response(invoice.model_dump(mode="json", by_alias=True, exclude_none=True))
