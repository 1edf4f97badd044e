# ==============================================================================
# SERVICIO DE REPORTES E HISTORIAL
# ==============================================================================
# Lecturas sobre el historial de ventas: resumen de facturación, búsqueda
# en el historial y resumen compacto para el análisis con IA.
# ==============================================================================

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app_pdv.models import PaymentMethod, Sale
from app_pdv.repositories.interfaces import ISalesRepository

# Máximo de ventas enviadas al análisis con IA
INSIGHT_SALES_LIMIT = 50


def sale_day(sale: Sale) -> str:
    """Fecha de la venta (YYYY-MM-DD, UTC)."""
    try:
        moment = datetime.fromisoformat(sale.date)
    except (TypeError, ValueError):
        return (sale.date or '')[:10]
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime('%Y-%m-%d')


class ReportService:
    """
    Servicio de reportes.

    Responsabilidades:
    - Facturación total, cantidad de ventas, ticket promedio
    - Facturación por método de pago y ganancia bruta
    - Historial filtrado por texto y fecha
    """

    def __init__(self, sales_repo: ISalesRepository):
        self.sales_repo = sales_repo

    def _sales(self) -> List[Sale]:
        return [Sale.from_dict(s) for s in self.sales_repo.load()]

    def summary(self) -> Dict[str, Any]:
        """
        Resumen de todas las ventas registradas.

        Returns:
            Dict con total_revenue, sales_count, average_ticket,
            by_payment {método: monto} y gross_profit
        """
        sales = self._sales()
        revenue = round(sum(s.total for s in sales), 2)
        count = len(sales)

        by_payment = {method.value: 0.0 for method in PaymentMethod}
        profit = 0.0
        for sale in sales:
            by_payment[sale.payment_method] = round(by_payment.get(sale.payment_method, 0.0) + sale.total, 2)
            profit += sum((item.price - item.cost) * item.qty for item in sale.items) - sale.discount

        return {
            'total_revenue': revenue,
            'sales_count': count,
            'average_ticket': round(revenue / count, 2) if count else 0.0,
            'by_payment': by_payment,
            'gross_profit': round(profit, 2),
        }

    def history(self, term: str = '', date: str = '') -> List[Sale]:
        """
        Historial de ventas, más recientes primero.

        Args:
            term: Texto contenido en el ID o en el cliente
            date: Día exacto (YYYY-MM-DD), vacío = todos

        Returns:
            Lista de ventas que cumplen ambos filtros
        """
        lowered = (term or '').strip().lower()
        date = (date or '').strip()

        results = []
        for sale in self._sales():
            if lowered and lowered not in sale.id.lower() and lowered not in sale.client.lower():
                continue
            if date and sale_day(sale) != date:
                continue
            results.append(sale)

        results.sort(key=lambda s: (s.date, s.id), reverse=True)
        return results

    def get_sale(self, sale_id: str) -> Optional[Sale]:
        """Venta por ID, o None si no existe."""
        data = self.sales_repo.get_by_id(sale_id)
        return Sale.from_dict(data) if data else None

    def recent_for_insight(self, limit: int = INSIGHT_SALES_LIMIT) -> List[Dict[str, Any]]:
        """
        Últimas ventas resumidas para el análisis con IA.

        Returns:
            Lista de {date, items: ["2x Nombre"], total, method}
        """
        limit = max(0, min(limit, INSIGHT_SALES_LIMIT))
        return [
            {
                'date': sale.date,
                'items': [f'{item.qty}x {item.name}' for item in sale.items],
                'total': sale.total,
                'method': sale.payment_method,
            }
            for sale in (Sale.from_dict(s) for s in self.sales_repo.recent(limit))
        ]
