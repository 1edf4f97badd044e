# ==============================================================================
# SERVICIO DE COBRO (finalizar, suspender, cancelar)
# ==============================================================================
# Cierra o abandona el carrito de la caja como una sola unidad de trabajo.
#
# FINALIZAR:
#   1. Validar: carrito con líneas y, en efectivo, monto recibido >= total
#   2. Calcular catálogo con stock descontado y armar la venta (sin guardar)
#   3. Guardar catálogo, agregar la venta al historial, vaciar carrito
# Si una validación falla no cambia nada. Los productos que ya no están
# en el catálogo se omiten al descontar; la venta se registra igual.
# El stock puede quedar negativo.
# ==============================================================================

from typing import Any, Dict, Optional

from app_pdv.models import (
    CartItem,
    DEFAULT_CLIENT,
    SUSPENDED_UNKNOWN_CLIENT,
    PaymentMethod,
    Sale,
    SuspendedSale,
    new_record_id,
    utc_now_iso,
)
from app_pdv.performance_logger import log_event, profile_function
from app_pdv.repositories.interfaces import ISalesRepository, ISuspendedRepository
from app_pdv.services.cart_service import CartService, PosSession
from app_pdv.services.catalog_service import CatalogService
from app_pdv.services.feedback_service import FeedbackService


class CheckoutService:
    """
    Servicio que coordina carrito, catálogo e historial.

    Responsabilidades:
    - Finalizar la venta (stock + historial + limpiar carrito)
    - Suspender el carrito para retomarlo después
    - Cancelar la venta en curso
    """

    def __init__(
        self,
        cart_service: CartService,
        catalog_service: CatalogService,
        sales_repo: ISalesRepository,
        suspended_repo: ISuspendedRepository,
        feedback_service: FeedbackService
    ):
        self.cart_service = cart_service
        self.catalog_service = catalog_service
        self.sales_repo = sales_repo
        self.suspended_repo = suspended_repo
        self.feedback_service = feedback_service

    # =========================================================================
    # FINALIZAR VENTA
    # =========================================================================

    @profile_function(name='Finalizar venta')
    def finalize(self, session: PosSession) -> Dict[str, Any]:
        """
        Registra la venta en curso.

        Args:
            session: Estado de la caja (líneas y datos de pago)

        Returns:
            Dict con resultado:
            - ok: True/False
            - sale: Venta registrada (Sale)
            - change: Vuelto entregado
            - skipped: Códigos que ya no estaban en el catálogo
            - error/code: si falló la validación
        """
        if session.is_empty:
            return {'ok': False, 'code': 'empty_cart', 'error': 'El carrito está vacío'}

        subtotal = self.cart_service.subtotal(session)
        total = self.cart_service.total(session)
        method = session.payment_method

        if method == PaymentMethod.CASH and self.cart_service.cash_amount(session) < total:
            return {
                'ok': False,
                'code': 'insufficient_payment',
                'error': 'Monto recibido insuficiente',
                'total': total,
            }

        change = self.cart_service.change(session)
        catalog, skipped = self.catalog_service.plan_stock_decrements(session.lines)
        sale = Sale(
            id=new_record_id(),
            date=utc_now_iso(),
            items=[CartItem.from_dict(i.to_dict()) for i in session.lines],
            subtotal=subtotal,
            discount=session.discount,
            total=total,
            payment_method=method.value,
            client=session.client_name.strip() or DEFAULT_CLIENT,
        )

        self.catalog_service.commit_catalog(catalog)
        self.sales_repo.create_sale(sale.to_dict())
        self.cart_service.clear(session)
        session.reset_transient_inputs()

        if skipped:
            log_event('ADVERTENCIA', f"Venta {sale.id}: productos fuera del catálogo, stock no descontado: {', '.join(skipped)}")
        log_event('INFO', f"Venta {sale.id} registrada: total {sale.total:.2f} ({sale.payment_label})")
        self.feedback_service.confirm()

        return {'ok': True, 'sale': sale, 'change': change, 'skipped': skipped}

    # =========================================================================
    # SUSPENDER / CANCELAR
    # =========================================================================

    @profile_function(name='Suspender venta')
    def suspend(self, session: PosSession, client_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Aparta el carrito en la cola de ventas suspendidas.
        El descuento no se guarda.

        Args:
            session: Estado de la caja
            client_name: Cliente de la venta apartada (None = el de la sesión)

        Returns:
            Dict con ok y la venta suspendida, o error empty_cart
        """
        if session.is_empty:
            return {'ok': False, 'code': 'empty_cart', 'error': 'El carrito está vacío'}

        client = session.client_name if client_name is None else client_name
        suspended = SuspendedSale(
            id=new_record_id(),
            date=utc_now_iso(),
            items=[CartItem.from_dict(i.to_dict()) for i in session.lines],
            client=client.strip() or SUSPENDED_UNKNOWN_CLIENT,
        )
        self.suspended_repo.add(suspended.to_dict())

        session.lines = []
        session.client_name = ''
        session.discount = 0.0

        log_event('INFO', f"Venta suspendida {suspended.id} ({suspended.total_items} ítems)")
        return {'ok': True, 'suspended': suspended}

    def cancel(self, session: PosSession) -> Dict[str, Any]:
        """
        Descarta la venta en curso sin registrar nada.
        La confirmación del operador la pide quien llama (ver main.py).
        """
        self.cart_service.clear(session)
        session.reset_transient_inputs()
        return {'ok': True}
