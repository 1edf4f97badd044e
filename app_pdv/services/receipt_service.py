# ==============================================================================
# SERVICIO DE RECIBOS
# ==============================================================================
# Genera el recibo imprimible (80 mm, monoespaciado) de una venta
# finalizada. Solo lee la venta y la configuración; no modifica nada.
# ==============================================================================

from datetime import datetime
from typing import Any, Dict, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from app_pdv.models import DEFAULT_CLIENT, AppSettings, Sale

DEFAULT_FOOTER = 'Obrigado pela preferência!'


def format_money(value: float) -> str:
    """Monto con dos decimales y coma decimal (R$ 1.234,50)."""
    text = f'{float(value or 0):,.2f}'
    return 'R$ ' + text.replace(',', '_').replace('.', ',').replace('_', '.')


def format_local_date(iso_date: str) -> str:
    """Fecha ISO (UTC) en hora local: dd/mm/aaaa hh:mm."""
    try:
        moment = datetime.fromisoformat(iso_date)
    except (TypeError, ValueError):
        return iso_date or ''
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.strftime('%d/%m/%Y %H:%M')


class ReceiptService:
    """Renderiza recibos con la plantilla templates/receipt.html."""

    TEMPLATE = 'receipt.html'

    def __init__(self, env: Optional[Environment] = None):
        self.env = env or Environment(
            loader=PackageLoader('app_pdv', 'templates'),
            autoescape=select_autoescape(['html']),
        )
        self.env.filters['money'] = format_money

    def build_context(self, sale: Sale, settings: AppSettings) -> Dict[str, Any]:
        """Datos que necesita la plantilla."""
        return {
            'sale': sale,
            'settings': settings,
            'order_number': sale.short_id,
            'printed_date': format_local_date(sale.date),
            'lines': [
                {
                    'qty': item.qty,
                    'name': item.name,
                    'barcode_tail': item.barcode[-4:],
                    'total': item.line_total,
                }
                for item in sale.items
            ],
            'payment_label': sale.payment_label,
            'show_client': bool(sale.client) and sale.client != DEFAULT_CLIENT,
            'footer': settings.receipt_footer or DEFAULT_FOOTER,
        }

    def render_html(self, sale: Sale, settings: AppSettings) -> str:
        """
        Genera el HTML del recibo.

        Args:
            sale: Venta finalizada
            settings: Datos de la empresa

        Returns:
            Documento HTML listo para imprimir
        """
        template = self.env.get_template(self.TEMPLATE)
        return template.render(**self.build_context(sale, settings))
