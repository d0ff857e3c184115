# translations.py
"""
Message catalogs for rendered documents.

The engine never branches on a language: every user-visible string goes
through a Translator built from one of these catalogs. Adding a locale means
adding a catalog.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping


_EN = {
    "kind.estimate": "ESTIMATE",
    "kind.invoice": "INVOICE",
    "file.estimate": "Estimate",
    "file.invoice": "Invoice",

    "parties.client": "CLIENT",
    "parties.email": "Email: {value}",
    "parties.phone": "Tel: {value}",

    "meta.title.estimate": "ESTIMATE DETAILS",
    "meta.title.invoice": "INVOICE DETAILS",
    "meta.status": "Status:",
    "meta.issue_date": "Issue date:",
    "meta.valid_until": "Valid until:",
    "meta.due_date": "Due date:",
    "meta.payment_method": "Payment method:",
    "meta.project": "Project:",
    "meta.project_details": "Details:",

    "table.title": "SERVICE DETAILS",
    "table.description": "Description",
    "table.quantity": "Qty.",
    "table.unit_price": "Unit Price",
    "table.amount": "Total",
    "table.notes": "Notes",
    "table.more_items": "+ {count} more items",

    "totals.subtotal": "Subtotal:",
    "totals.tax": "Tax ({rate}%):",
    "totals.discount": "Discount ({rate}%):",
    "totals.total": "TOTAL:",
    "totals.paid": "Paid:",
    "totals.balance_due": "Balance Due:",

    "signature.client_title": "CLIENT SIGNATURE",
    "signature.line_caption": "CUSTOMER SIGNATURE",
    "signature.date": "Signature date: {date}",
    "signature.error": "Error loading client signature",

    "terms.title": "TERMS AND CONDITIONS",
    "notes.title": "NOTES",
    "section.continued": "{title} (cont.)",

    "footer.thanks": "Thank you for your business!",
    "footer.page": "Page {page} of {pages}",
    "footer.generated": "Generated on {date} by {business}",

    "date.not_specified": "Not specified",
    "date.invalid": "Invalid date",

    "status.draft": "Draft",
    "status.pending": "Pending",
    "status.sent": "Sent",
    "status.accepted": "Accepted",
    "status.rejected": "Rejected",
    "status.converted": "Converted to Invoice",
    "status.paid": "Paid",
    "status.partially_paid": "Partially Paid",
    "status.overdue": "Overdue",
    "status.cancelled": "Cancelled",
}

_ES = {
    "kind.estimate": "ESTIMADO",
    "kind.invoice": "FACTURA",
    "file.estimate": "Estimado",
    "file.invoice": "Factura",

    "parties.client": "CLIENTE",
    "parties.email": "Email: {value}",
    "parties.phone": "Tel: {value}",

    "meta.title.estimate": "DETALLES DEL ESTIMADO",
    "meta.title.invoice": "DETALLES DE LA FACTURA",
    "meta.status": "Estado:",
    "meta.issue_date": "Fecha de emisión:",
    "meta.valid_until": "Válido hasta:",
    "meta.due_date": "Vencimiento:",
    "meta.payment_method": "Método de pago:",
    "meta.project": "Proyecto:",
    "meta.project_details": "Detalles:",

    "table.title": "DETALLE DE SERVICIOS",
    "table.description": "Descripción",
    "table.quantity": "Cant.",
    "table.unit_price": "Precio unit.",
    "table.amount": "Total",
    "table.notes": "Notas",
    "table.more_items": "+ {count} partidas más",

    "totals.subtotal": "Subtotal:",
    "totals.tax": "Impuesto ({rate}%):",
    "totals.discount": "Descuento ({rate}%):",
    "totals.total": "TOTAL:",
    "totals.paid": "Pagado:",
    "totals.balance_due": "Saldo pendiente:",

    "signature.client_title": "FIRMA DEL CLIENTE",
    "signature.line_caption": "FIRMA DEL CLIENTE",
    "signature.date": "Fecha de firma: {date}",
    "signature.error": "Error al cargar la firma del cliente",

    "terms.title": "TÉRMINOS Y CONDICIONES",
    "notes.title": "NOTAS",
    "section.continued": "{title} (cont.)",

    "footer.thanks": "¡Gracias por su preferencia!",
    "footer.page": "Página {page} de {pages}",
    "footer.generated": "Generado el {date} por {business}",

    "date.not_specified": "No especificado",
    "date.invalid": "Fecha inválida",

    "status.draft": "Borrador",
    "status.pending": "Pendiente",
    "status.sent": "Enviado",
    "status.accepted": "Aceptado",
    "status.rejected": "Rechazado",
    "status.converted": "Convertido en factura",
    "status.paid": "Pagado",
    "status.partially_paid": "Parcialmente pagado",
    "status.overdue": "Vencido",
    "status.cancelled": "Cancelado",
}

CATALOGS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "en": MappingProxyType(_EN),
    "es": MappingProxyType(_ES),
})


class Translator:
    """Looks up message keys in one catalog, falling back to English, then to the key."""

    def __init__(self, messages: Mapping[str, str], language: str = "en"):
        self.language = language
        self._messages = messages

    def __call__(self, key: str, **kwargs) -> str:
        template = self._messages.get(key)
        if template is None:
            template = _EN.get(key, key)
        return template.format(**kwargs) if kwargs else template

    def has(self, key: str) -> bool:
        return key in self._messages or key in _EN


def get_translator(locale: str | None = None) -> Translator:
    language = (locale or "en").replace("_", "-").split("-")[0].strip().lower()
    if language not in CATALOGS:
        language = "en"
    return Translator(CATALOGS[language], language)
