# ==============================================================================
# SERVICIO DE VENTAS SUSPENDIDAS
# ==============================================================================
# Carritos apartados para atender a otro cliente y retomarlos después.
# Restaurar SIEMPRE reemplaza el carrito actual (no mezcla). Si el carrito
# tiene productos, la ruta pide antes la confirmación del operador.
# ==============================================================================

from typing import Any, Dict, List, Optional

from app_pdv.models import SUSPENDED_UNKNOWN_CLIENT, SuspendedSale
from app_pdv.performance_logger import log_event, profile_function
from app_pdv.repositories.interfaces import ISuspendedRepository
from app_pdv.services.cart_service import PosSession


class SuspendedService:
    """Cola de ventas suspendidas, en orden de llegada."""

    def __init__(self, suspended_repo: ISuspendedRepository):
        self.suspended_repo = suspended_repo

    def list_suspended(self) -> List[SuspendedSale]:
        """Ventas suspendidas en orden de inserción."""
        return [SuspendedSale.from_dict(s) for s in self.suspended_repo.load()]

    def get(self, suspended_id: str) -> Optional[SuspendedSale]:
        data = self.suspended_repo.get_by_id(suspended_id)
        return SuspendedSale.from_dict(data) if data is not None else None

    @profile_function(name='Restaurar venta suspendida')
    def restore(self, session: PosSession, suspended_id: str) -> Dict[str, Any]:
        """
        Pasa una venta suspendida al carrito y la quita de la cola.

        Args:
            session: Estado de la caja
            suspended_id: ID de la venta suspendida

        Returns:
            Dict con ok y la venta restaurada, o error not_found
        """
        suspended = self.get(suspended_id)
        if suspended is None:
            return {'ok': False, 'code': 'not_found', 'error': 'Venta suspendida no encontrada'}

        session.lines = list(suspended.items)
        session.client_name = '' if suspended.client == SUSPENDED_UNKNOWN_CLIENT else suspended.client
        session.discount = 0.0
        self.suspended_repo.remove(suspended.id)

        log_event('INFO', f"Venta suspendida {suspended.id} restaurada")
        return {'ok': True, 'suspended': suspended}

    def delete(self, suspended_id: str) -> Dict[str, Any]:
        """Elimina la venta suspendida; si no existe no hace nada."""
        deleted = self.suspended_repo.remove(suspended_id)
        if deleted:
            log_event('INFO', f"Venta suspendida {suspended_id} eliminada")
        return {'ok': True, 'deleted': deleted}
