# ==============================================================================
# SERVICIO DE CARRITO
# ==============================================================================
# Centraliza la lógica del carrito de la venta en curso.
#
# El estado de la caja (líneas, descuento, método de pago, efectivo
# recibido, cliente) vive en un objeto PosSession que el contenedor crea
# y pasa explícitamente a cada operación. No hay carrito global.
#
# Reglas:
# - Una sola línea por código de barras; volver a agregar suma 1
# - No se agrega un producto con stock <= 0
# - Toda línea tiene qty >= 1; bajar a 0 elimina la línea
# - Subtotal, total y vuelto se recalculan en cada lectura
# ==============================================================================

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from app_pdv.models import CartItem, PaymentMethod, Product, items_subtotal
from app_pdv.services.catalog_service import CatalogService
from app_pdv.services.feedback_service import FeedbackService

_LEADING_NUMBER = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')


def parse_amount(value: Any) -> float:
    """
    Convierte lo escrito en un campo de monto a número.

    Toma el número inicial ("20", "20.5", "20,50", "1e3", "20abc" → 20);
    vacío, texto sin número, NaN o infinito valen 0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value or '').strip().replace(',', '.')
        match = _LEADING_NUMBER.match(text)
        number = float(match.group(0)) if match else 0.0
    return number if math.isfinite(number) else 0.0


@dataclass
class PosSession:
    """
    Estado de la caja para la venta en curso.

    Attributes:
        lines: Líneas del carrito (orden de agregado)
        discount: Descuento en moneda
        payment_method: Método de pago elegido
        cash_received: Efectivo recibido, tal como se escribió
        client_name: Nombre del cliente ('' = sin nombre)
    """
    lines: List[CartItem] = field(default_factory=list)
    discount: float = 0.0
    payment_method: PaymentMethod = PaymentMethod.CASH
    cash_received: str = ''
    client_name: str = ''

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def reset_transient_inputs(self) -> None:
        """Limpia efectivo recibido, cliente y descuento."""
        self.cash_received = ''
        self.client_name = ''
        self.discount = 0.0


class CartService:
    """
    Servicio para gestión del carrito de la caja.

    Responsabilidades:
    - Agregar/eliminar líneas y cambiar cantidades
    - Guardar los datos de pago de la venta en curso
    - Calcular subtotal, total y vuelto
    """

    def __init__(self, catalog_service: CatalogService, feedback_service: FeedbackService):
        """
        Inicializa el servicio de carrito.

        Args:
            catalog_service: Servicio de catálogo (escaneo)
            feedback_service: Avisos sonoros
        """
        self.catalog_service = catalog_service
        self.feedback_service = feedback_service

    # =========================================================================
    # LÍNEAS DEL CARRITO
    # =========================================================================

    def add(self, session: PosSession, product: Product) -> Dict[str, Any]:
        """
        Agrega una unidad del producto al carrito.

        Args:
            session: Estado de la caja
            product: Producto del catálogo

        Returns:
            Dict con ok, item o error out_of_stock
        """
        if product.stock <= 0:
            return {
                'ok': False,
                'code': 'out_of_stock',
                'error': f'Producto sin stock: {product.name}',
            }

        for item in session.lines:
            if item.barcode == product.barcode:
                item.qty += 1
                break
        else:
            item = CartItem.from_product(product, qty=1)
            session.lines.append(item)

        self.feedback_service.confirm()
        return {'ok': True, 'item': item}

    def add_by_barcode(self, session: PosSession, barcode: str) -> Dict[str, Any]:
        """Agrega por código exacto (lector de código de barras)."""
        product = self.catalog_service.lookup_exact(barcode)
        if not product:
            return {'ok': False, 'code': 'not_found', 'error': 'Producto no encontrado'}
        return self.add(session, product)

    def remove(self, session: PosSession, index: int) -> Dict[str, Any]:
        """
        Elimina la línea en la posición indicada.
        Un índice fuera de rango no hace nada.
        """
        if 0 <= index < len(session.lines):
            removed = session.lines.pop(index)
            return {'ok': True, 'removed': removed}
        return {'ok': True, 'removed': None}

    def set_quantity(self, session: PosSession, index: int, qty: int) -> Dict[str, Any]:
        """
        Cambia la cantidad de una línea. Con qty <= 0 la línea se elimina.
        Un índice fuera de rango no hace nada.
        """
        if not 0 <= index < len(session.lines):
            return {'ok': True, 'item': None}
        if qty <= 0:
            return {'ok': True, 'item': None, 'removed': session.lines.pop(index)}
        session.lines[index].qty = qty
        return {'ok': True, 'item': session.lines[index]}

    def clear(self, session: PosSession) -> None:
        """Vacía el carrito."""
        session.lines.clear()

    # =========================================================================
    # DATOS DE PAGO
    # =========================================================================

    def set_payment_inputs(
        self,
        session: PosSession,
        payment_method: Any = None,
        cash_received: Any = None,
        discount: Any = None,
        client_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Actualiza los datos de pago. Solo cambia lo que se recibe; si algún
        valor es inválido no se cambia nada.

        Returns:
            Dict con ok o error (invalid_payment_method, invalid_discount)
        """
        method = session.payment_method
        if payment_method is not None:
            method = PaymentMethod.parse(payment_method)
            if method is None:
                return {
                    'ok': False,
                    'code': 'invalid_payment_method',
                    'error': f'Método de pago inválido: {payment_method}',
                }

        new_discount = session.discount
        if discount is not None:
            if isinstance(discount, float) and not math.isfinite(discount):
                return {
                    'ok': False,
                    'code': 'invalid_discount',
                    'error': 'El descuento debe ser un número',
                }
            new_discount = parse_amount(discount)
            if new_discount < 0:
                return {
                    'ok': False,
                    'code': 'invalid_discount',
                    'error': 'El descuento no puede ser negativo',
                }

        session.payment_method = method
        session.discount = round(new_discount, 2)
        if cash_received is not None:
            session.cash_received = str(cash_received)
        if client_name is not None:
            session.client_name = str(client_name)
        return {'ok': True}

    # =========================================================================
    # TOTALES
    # =========================================================================

    def subtotal(self, session: PosSession) -> float:
        """Suma de precio x cantidad de las líneas."""
        return items_subtotal(session.lines)

    def total(self, session: PosSession) -> float:
        """Subtotal menos descuento (puede quedar negativo)."""
        return round(self.subtotal(session) - session.discount, 2)

    def cash_amount(self, session: PosSession) -> float:
        return parse_amount(session.cash_received)

    def change(self, session: PosSession) -> float:
        """Vuelto: solo en efectivo y nunca negativo."""
        if session.payment_method != PaymentMethod.CASH:
            return 0.0
        return round(max(0.0, self.cash_amount(session) - self.total(session)), 2)

    def get_cart(self, session: PosSession) -> Dict[str, Any]:
        """
        Obtiene el carrito con totales calculados.

        Returns:
            Dict con items, totales y datos de pago
        """
        return {
            'items': [
                {**item.to_dict(), 'line_total': item.line_total}
                for item in session.lines
            ],
            'items_count': len(session.lines),
            'total_items': sum(item.qty for item in session.lines),
            'subtotal': self.subtotal(session),
            'discount': session.discount,
            'total': self.total(session),
            'payment_method': session.payment_method.value,
            'cash_received': session.cash_received,
            'change': self.change(session),
            'client_name': session.client_name,
        }
