"""
电子门票

- 二维码内容为紧凑 JSON：{"regId": ..., "name": ..., "team": ...}
- render_qr_png：qrcode 生成 PNG（高容错级别）
- render_ticket_pdf：reportlab 绘制单页 A4 门票（活动抬头、二维码、成员与队伍信息、活动信息）
"""

from __future__ import annotations

import io
import json
from dataclasses import dataclass

import qrcode
from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as pdf_canvas

from apps.common.exceptions import ValidationError

TICKET_FILENAME = "e-ticket.pdf"


@dataclass(frozen=True)
class TicketPayload:
    registration_id: str
    name: str
    team: str


@dataclass(frozen=True)
class Ticket:
    brand: str
    team_name: str
    registration_id: str
    member_name: str
    member_email: str
    member_phone: str
    event_date: str
    venue: str
    workshop_title: str = ""

    @property
    def payload(self) -> TicketPayload:
        return TicketPayload(registration_id=self.registration_id, name=self.member_name, team=self.team_name)


def encode_payload(payload: TicketPayload) -> str:
    return json.dumps(
        {"regId": payload.registration_id, "name": payload.name, "team": payload.team},
        separators=(",", ":"),
        ensure_ascii=False,
    )


def decode_payload(raw: str) -> TicketPayload:
    """扫码端使用：解析失败抛 ValidationError"""
    try:
        data = json.loads(raw)
        return TicketPayload(registration_id=data["regId"], name=data["name"], team=data["team"])
    except (TypeError, ValueError, KeyError) as exc:
        raise ValidationError(message="Invalid ticket code") from exc


def render_qr_png(data: str, size: int = 240) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white").get_image()
    image = image.convert("RGB").resize((size, size), Image.NEAREST)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def render_ticket_pdf(ticket: Ticket) -> bytes:
    buffer = io.BytesIO()
    width, height = A4
    pdf = pdf_canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(f"{ticket.brand} e-ticket")

    pdf.setFont("Helvetica-Bold", 24)
    pdf.drawCentredString(width / 2.0, height - 20 * mm, ticket.brand)

    qr_size = 60 * mm
    qr_png = render_qr_png(encode_payload(ticket.payload))
    pdf.drawImage(
        ImageReader(io.BytesIO(qr_png)),
        (width - qr_size) / 2.0,
        height - 30 * mm - qr_size,
        width=qr_size,
        height=qr_size,
    )

    y = height - 100 * mm
    pdf.setFont("Helvetica-Bold", 14)
    pdf.drawString(20 * mm, y, "E-Ticket")
    pdf.setFont("Helvetica", 12)
    lines = [
        f"Team: {ticket.team_name}",
        f"Registration ID: {ticket.registration_id}",
        f"Name: {ticket.member_name}",
        f"Email: {ticket.member_email}",
        f"Phone: {ticket.member_phone}",
    ]
    y -= 20 * mm
    for line in lines:
        pdf.drawString(20 * mm, y, line)
        y -= 10 * mm

    y -= 10 * mm
    pdf.drawString(20 * mm, y, "Event Details:")
    details = [f"Date: {ticket.event_date}", f"Venue: {ticket.venue}"]
    if ticket.workshop_title:
        details.append(f"Workshop: {ticket.workshop_title}")
    for line in details:
        y -= 10 * mm
        pdf.drawString(20 * mm, y, line)

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
