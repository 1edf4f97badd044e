# ==============================================================================
# REPOSITORIO DE VENTAS (historial)
# ==============================================================================
# Encapsula todo el acceso a sales.json
# Las ventas se almacenan como lista: [{venta1}, {venta2}, ...]
# Solo se agregan ventas: una venta registrada nunca se modifica.
# ==============================================================================

from typing import Any, Dict, List, Optional

from app_pdv.models import Sale
from app_pdv.repositories.base import ListRepository


class SalesRepository(ListRepository):
    """
    Repositorio para el historial de ventas.

    Formato de datos en sales.json:
    [
        {
            "id": "1718900000000",
            "date": "2024-06-20T14:13:20+00:00",
            "items": [...],
            "subtotal": 20.0,
            "discount": 5.0,
            "total": 15.0,
            "payment_method": "cash",
            "client": "Cliente General"
        }
    ]
    """

    def __init__(self, base_path: str):
        """
        Inicializa el repositorio de ventas.

        Args:
            base_path: Directorio de datos
        """
        super().__init__(base_path, 'sales')

    def _normalize(self, raw_data: List[Any]) -> List[Dict[str, Any]]:
        """Completa ventas viejas (sin subtotal, descuento o con 'money')."""
        return [Sale.from_dict(s).to_dict() for s in raw_data if isinstance(s, dict)]

    def load(self) -> List[Dict[str, Any]]:
        """
        Carga todas las ventas.

        Returns:
            Lista de ventas en orden de registro
        """
        return self.get_all()

    def get_by_id(self, sale_id: str) -> Optional[Dict[str, Any]]:
        """
        Busca una venta por su ID.

        Returns:
            Datos de la venta o None
        """
        return self.find_by('id', str(sale_id))

    def create_sale(self, sale_data: Dict[str, Any]) -> str:
        """
        Registra una nueva venta al final del historial.

        Args:
            sale_data: Datos de la venta (debe incluir 'id')

        Returns:
            ID de la venta
        """
        self.append(sale_data)
        return sale_data.get('id', '')

    def recent(self, limit: int) -> List[Dict[str, Any]]:
        """
        Últimas ventas registradas.

        Args:
            limit: Cantidad máxima

        Returns:
            Las últimas `limit` ventas, en orden de registro
        """
        if limit <= 0:
            return []
        return self.get_all()[-limit:]
