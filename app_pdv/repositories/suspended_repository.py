# ==============================================================================
# REPOSITORIO DE VENTAS SUSPENDIDAS
# ==============================================================================
# Encapsula todo el acceso a suspended.json
# Cola en orden de llegada: [{suspendida1}, {suspendida2}, ...]
# ==============================================================================

from typing import Any, Dict, List, Optional

from app_pdv.models import SuspendedSale
from app_pdv.repositories.base import ListRepository


class SuspendedRepository(ListRepository):
    """
    Repositorio para carritos apartados.

    Formato de datos en suspended.json:
    [
        {"id": "...", "date": "...", "items": [...], "client": "N/A"}
    ]
    """

    def __init__(self, base_path: str):
        super().__init__(base_path, 'suspended')

    def _normalize(self, raw_data: List[Any]) -> List[Dict[str, Any]]:
        return [SuspendedSale.from_dict(s).to_dict() for s in raw_data if isinstance(s, dict)]

    def load(self) -> List[Dict[str, Any]]:
        """Carga la cola completa (orden de inserción)."""
        return self.get_all()

    def add(self, suspended: Dict[str, Any]) -> bool:
        """Agrega una venta suspendida al final de la cola."""
        return self.append(suspended)

    def get_by_id(self, suspended_id: str) -> Optional[Dict[str, Any]]:
        """Busca una venta suspendida por su ID."""
        return self.find_by('id', str(suspended_id))

    def remove(self, suspended_id: str) -> bool:
        """
        Elimina una venta suspendida.

        Returns:
            True si existía
        """
        return self.remove_where('id', str(suspended_id)) > 0
