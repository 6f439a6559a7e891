"""Command-line entry point.

Usage::

    python -m escrow_client --email buyer@example.com show ESC-1030
"""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from escrow_client.errors import ClientError
from escrow_client.factory import ClientFactory
from escrow_client.formatting import format_idr, status_label
from escrow_client.lifecycle import HAPPY_PATH, Resolution, timeline_step
from escrow_client.logging import setup_logging
from escrow_client.models import DisputeReason, EscrowStatus, PaymentMethod
from escrow_client.workflow import EscrowWorkflow

if TYPE_CHECKING:
    from escrow_client.admin import AdminClient
    from escrow_client.client import EscrowClient

EMAIL_ENV_VAR = "ESCROW_CLIENT_EMAIL"
PASSWORD_ENV_VAR = "ESCROW_CLIENT_PASSWORD"  # nosec B105

ADMIN_COMMANDS = frozenset({"release", "resolve"})

_OUTCOMES = {
    "refund": Resolution.REFUND,
    "release": Resolution.RELEASE,
    "split": Resolution.SPLIT,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="escrow_client",
        description="Work with escrows on the QRIS / BI-FAST escrow platform.",
    )
    parser.add_argument("--config", type=Path, help="Path to config.yaml.")
    parser.add_argument("--email", help=f"Login email (default: ${EMAIL_ENV_VAR}).")
    parser.add_argument("--password", help=f"Login password (default: ${PASSWORD_ENV_VAR}).")

    commands = parser.add_subparsers(dest="command", required=True)

    escrows = commands.add_parser("escrows", help="List your escrows.")
    escrows.add_argument(
        "--status", choices=[status.value for status in EscrowStatus], help="Filter by status."
    )

    show = commands.add_parser("show", help="Show an escrow and the actions open to you.")
    show.add_argument("escrow_id")

    fund = commands.add_parser("fund", help="Pay for an escrow and wait for confirmation.")
    fund.add_argument("escrow_id")
    fund.add_argument(
        "--method",
        choices=[method.value for method in PaymentMethod],
        default=PaymentMethod.QRIS.value,
    )
    fund.add_argument("--qr-code-url", help="QRIS code URL from the payment gateway.")

    ship = commands.add_parser("ship", help="Mark a funded escrow as shipped.")
    ship.add_argument("escrow_id")
    ship.add_argument("--receipt", required=True, help="Courier receipt number.")
    ship.add_argument("--media", type=Path, help="Photo or video of the shipment.")

    confirm = commands.add_parser("confirm", help="Confirm the goods arrived.")
    confirm.add_argument("escrow_id")
    confirm.add_argument("--proof-url", help="Upload this receipt proof before confirming.")

    dispute = commands.add_parser("dispute", help="Open a dispute.")
    dispute.add_argument("escrow_id")
    dispute.add_argument(
        "--reason",
        choices=[reason.value for reason in DisputeReason],
        default=DisputeReason.ITEM_NOT_AS_DESCRIBED.value,
    )
    dispute.add_argument("--note", default="")

    release = commands.add_parser("release", help="Release a delivered escrow (admin).")
    release.add_argument("escrow_id")

    resolve = commands.add_parser("resolve", help="Resolve a dispute (admin).")
    resolve.add_argument("escrow_id")
    resolve.add_argument("--dispute", required=True, dest="dispute_id")
    resolve.add_argument("--outcome", required=True, choices=sorted(_OUTCOMES))
    resolve.add_argument("--note", required=True)

    commands.add_parser("kyc", help="Show your KYC status.")

    return parser


def _load_upload(path: Path) -> tuple[str, bytes, str]:
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return path.name, path.read_bytes(), content_type


async def _open_workflow(client: EscrowClient, escrow_id: str) -> EscrowWorkflow:
    workflow = EscrowWorkflow(client, escrow_id)
    await workflow.refresh()
    await workflow.load_viewer()
    return workflow


async def _cmd_escrows(client: EscrowClient, args: argparse.Namespace) -> None:
    status = EscrowStatus(args.status) if args.status else None
    escrows = await client.list_escrows(status=status)
    if not escrows:
        print("No results")
        return
    for escrow in escrows:
        print(f"{escrow.id}\t{escrow.seller}\t{format_idr(escrow.amount)}\t{status_label(escrow.status)}")


async def _cmd_show(client: EscrowClient, args: argparse.Namespace) -> None:
    workflow = await _open_workflow(client, args.escrow_id)
    escrow = workflow.escrow
    if escrow is None:
        return
    step = timeline_step(escrow.status)
    progress = f"{step}/{len(HAPPY_PATH)}" if step is not None else "off the happy path"
    actions = sorted(action.value for action in workflow.allowed_actions())

    print(f"Escrow {escrow.id}: {status_label(escrow.status)} ({progress})")
    print(f"  Buyer:   {escrow.buyer or '-'}")
    print(f"  Seller:  {escrow.seller}")
    print(f"  Amount:  {format_idr(escrow.amount)}")
    print(f"  Created: {escrow.created_at}")
    if escrow.payment_method is not None:
        print(f"  Method:  {escrow.payment_method.label}")
    print(f"  Actions: {', '.join(actions) if actions else 'none'}")


async def _cmd_fund(client: EscrowClient, args: argparse.Namespace) -> None:
    workflow = await _open_workflow(client, args.escrow_id)
    await workflow.fund(method=PaymentMethod(args.method), qr_code_url=args.qr_code_url)
    if workflow.escrow is not None and workflow.escrow.status is EscrowStatus.FUNDED:
        print("Payment confirmed")
        return
    if await workflow.wait_until_funded():
        print("Payment confirmed")
    else:
        print("Still waiting for payment confirmation")


async def _cmd_ship(client: EscrowClient, args: argparse.Namespace) -> None:
    workflow = await _open_workflow(client, args.escrow_id)
    media = _load_upload(args.media) if args.media is not None else None
    result = await workflow.ship(args.receipt, media=media)
    print(f"Shipment submitted. Tracking number: {result.tracking_number}")
    if result.audit is not None and result.audit.file_name:
        print(f"  File: {result.audit.file_name}")


async def _cmd_confirm(client: EscrowClient, args: argparse.Namespace) -> None:
    workflow = await _open_workflow(client, args.escrow_id)
    if args.proof_url:
        await workflow.upload_receipt(file_url=args.proof_url)
    await workflow.confirm_receipt()
    print("Receipt confirmed")


async def _cmd_dispute(client: EscrowClient, args: argparse.Namespace) -> None:
    workflow = await _open_workflow(client, args.escrow_id)
    dispute = await workflow.open_dispute(reason=DisputeReason(args.reason), note=args.note)
    print(f"Dispute opened: {dispute.id}")


async def _cmd_release(client: AdminClient, args: argparse.Namespace) -> None:
    workflow = await _open_workflow(client, args.escrow_id)
    await workflow.release()
    print(f"Escrow {args.escrow_id} released")


async def _cmd_resolve(client: AdminClient, args: argparse.Namespace) -> None:
    workflow = await _open_workflow(client, args.escrow_id)
    resolution = _OUTCOMES[args.outcome]
    await workflow.resolve(resolution, args.note, dispute_id=args.dispute_id)
    print(f"Escrow {args.escrow_id} resolved: {resolution.value}")


async def _cmd_kyc(client: EscrowClient, _args: argparse.Namespace) -> None:
    kyc = await client.get_my_kyc()
    print(f"KYC status: {kyc.display_status}")
    print(f"Level: {kyc.level or '-'}")


_HANDLERS = {
    "escrows": _cmd_escrows,
    "show": _cmd_show,
    "fund": _cmd_fund,
    "ship": _cmd_ship,
    "confirm": _cmd_confirm,
    "dispute": _cmd_dispute,
    "release": _cmd_release,
    "resolve": _cmd_resolve,
    "kyc": _cmd_kyc,
}


def _session_expired() -> None:
    print("Session expired, please log in again", file=sys.stderr)


async def _run(args: argparse.Namespace) -> int:
    factory = ClientFactory(config_path=args.config)
    setup_logging(
        factory.settings.logging.level,
        log_directory=factory.settings.logging.directory,
        stream=sys.stderr,
    )

    email = args.email or os.environ.get(EMAIL_ENV_VAR, "")
    password = args.password or os.environ.get(PASSWORD_ENV_VAR, "")

    if args.command in ADMIN_COMMANDS:
        client: EscrowClient = factory.admin_client(on_session_expired=_session_expired)
    else:
        client = factory.create_client(on_session_expired=_session_expired)

    try:
        await client.login(email, password)
        await _HANDLERS[args.command](client, args)  # type: ignore[operator]
    except (ClientError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await client.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Sync entry point."""
    args = _build_parser().parse_args(argv)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
