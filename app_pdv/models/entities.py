# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio.
# Diseñadas para ser independientes del mecanismo de persistencia.
#
# Hay UNA sola versión de cada entidad. Los datos viejos guardados con
# otra forma (claves camelCase, ventas sin subtotal/descuento, settings
# incompletos, método de pago 'money') se completan en from_dict().
# ==============================================================================

import math
import threading
import time
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum
from datetime import datetime, timezone


# ==============================================================================
# ENUMERACIONES Y CONSTANTES
# ==============================================================================

class PaymentMethod(str, Enum):
    """Métodos de pago aceptados en la caja."""
    CASH = "cash"
    CREDIT = "credit"
    DEBIT = "debit"
    PIX = "pix"

    @classmethod
    def parse(cls, value: Any) -> Optional['PaymentMethod']:
        """
        Convierte un valor recibido (JSON, formulario) a PaymentMethod.
        Acepta el nombre legacy 'money' para efectivo.

        Returns:
            PaymentMethod o None si el valor no es válido
        """
        if isinstance(value, cls):
            return value
        raw = str(value or '').strip().lower()
        if raw in LEGACY_PAYMENT_METHODS:
            raw = LEGACY_PAYMENT_METHODS[raw]
        try:
            return cls(raw)
        except ValueError:
            return None

    @property
    def label(self) -> str:
        """Etiqueta legible para pantalla y recibo."""
        return PAYMENT_LABELS[self.value]


LEGACY_PAYMENT_METHODS = {'money': 'cash', 'dinheiro': 'cash', 'efectivo': 'cash'}

PAYMENT_LABELS = {
    'cash': 'Efectivo',
    'credit': 'Crédito',
    'debit': 'Débito',
    'pix': 'Pix',
}

# Cliente por defecto de una venta sin nombre
DEFAULT_CLIENT = 'Cliente General'

# Marca de "cliente desconocido" en ventas suspendidas
SUSPENDED_UNKNOWN_CLIENT = 'N/A'

# Textos que cuentan como verdadero en opciones booleanas
TRUTHY_TEXT = ('1', 'true', 'yes', 'si', 'sí', 'on')

DEFAULT_CATEGORY = 'diversos'

CATEGORIES = [
    'cozinha',
    'decoração',
    'organizadores',
    'limpeza',
    'banheiro',
    'brinquedos',
    'ferramentas',
    'papelaria',
    'diversos',
]


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _to_text(value: Any, default: str = '') -> str:
    """Texto sin espacios de borde; None queda como default, no como 'None'."""
    if value is None:
        return default
    return str(value).strip()


def _to_bool(value: Any, default: bool) -> bool:
    """Booleano desde JSON o formulario ('false', '0', 'no' son False)."""
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_TEXT
    return bool(value)


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Devuelve el primer valor presente entre varias claves (snake/camel)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def utc_now_iso() -> str:
    """Timestamp actual en ISO 8601 (UTC)."""
    return datetime.now(timezone.utc).isoformat()


_id_lock = threading.Lock()
_last_id = 0


def new_record_id() -> str:
    """
    Genera un ID único para ventas y ventas suspendidas.

    Milisegundos desde epoch; si dos registros caen en el mismo
    milisegundo el segundo toma el siguiente número (siempre creciente).
    """
    global _last_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
        return str(candidate)


# ==============================================================================
# ENTIDADES DE CATÁLOGO
# ==============================================================================

@dataclass
class Product:
    """
    Producto del catálogo. La identidad es el código de barras.

    Attributes:
        barcode: Código de barras (clave única)
        name: Nombre del producto
        price: Precio de venta
        cost: Costo de compra
        stock: Existencias (puede quedar negativo tras vender de más)
        min_stock: Stock mínimo antes de alerta
        category: Categoría para clasificación
    """
    barcode: str
    name: str
    price: float = 0.0
    cost: float = 0.0
    stock: int = 0
    min_stock: int = 5
    category: str = DEFAULT_CATEGORY

    @property
    def is_low_stock(self) -> bool:
        """Stock en o por debajo del mínimo."""
        return self.stock <= self.min_stock

    def validate(self) -> Optional[str]:
        """
        Valida los campos del producto.

        Returns:
            Mensaje de error o None si es válido
        """
        if not self.barcode:
            return 'El código de barras es obligatorio'
        if not self.name:
            return 'El nombre es obligatorio'
        if self.price < 0:
            return 'El precio no puede ser negativo'
        if self.cost < 0:
            return 'El costo no puede ser negativo'
        if self.min_stock < 0:
            return 'El stock mínimo no puede ser negativo'
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia JSON."""
        return {
            'barcode': self.barcode,
            'name': self.name,
            'price': self.price,
            'cost': self.cost,
            'stock': self.stock,
            'min_stock': self.min_stock,
            'category': self.category,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """Crea instancia desde diccionario (acepta formato camelCase viejo)."""
        return cls(
            barcode=_to_text(data.get('barcode')),
            name=_to_text(data.get('name')),
            price=_to_float(data.get('price')),
            cost=_to_float(data.get('cost')),
            stock=_to_int(data.get('stock')),
            min_stock=_to_int(_pick(data, 'min_stock', 'minStock', default=5), 5),
            category=_to_text(_pick(data, 'category')) or DEFAULT_CATEGORY,
        )


# ==============================================================================
# ENTIDADES DE CARRITO
# ==============================================================================

@dataclass
class CartItem:
    """
    Línea del carrito: copia del producto al momento de agregarlo + cantidad.

    La copia queda congelada en la venta: si el producto cambia o se
    elimina del catálogo, el historial conserva los datos originales.
    """
    barcode: str
    name: str
    price: float
    cost: float = 0.0
    stock: int = 0
    min_stock: int = 0
    category: str = DEFAULT_CATEGORY
    qty: int = 1

    @property
    def line_total(self) -> float:
        """Total de la línea (precio x cantidad)."""
        return round(self.price * self.qty, 2)

    @classmethod
    def from_product(cls, product: Product, qty: int = 1) -> 'CartItem':
        """Crea la línea a partir del producto del catálogo."""
        return cls(
            barcode=product.barcode,
            name=product.name,
            price=product.price,
            cost=product.cost,
            stock=product.stock,
            min_stock=product.min_stock,
            category=product.category,
            qty=qty,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        return {
            'barcode': self.barcode,
            'name': self.name,
            'price': self.price,
            'cost': self.cost,
            'stock': self.stock,
            'min_stock': self.min_stock,
            'category': self.category,
            'qty': self.qty,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CartItem':
        """Crea instancia desde diccionario."""
        product = Product.from_dict(data)
        return cls.from_product(product, qty=max(1, _to_int(data.get('qty'), 1)))


def items_subtotal(items: List[CartItem]) -> float:
    """Suma de precio x cantidad de todas las líneas."""
    return round(sum(item.price * item.qty for item in items), 2)


# ==============================================================================
# ENTIDADES DE VENTA
# ==============================================================================

@dataclass
class Sale:
    """
    Venta finalizada. Una vez registrada en el historial no se modifica.

    Attributes:
        id: Identificador único (milisegundos de creación)
        date: Timestamp ISO de creación
        items: Copia de las líneas del carrito
        subtotal: Suma de precio x cantidad
        discount: Descuento aplicado
        total: subtotal - discount (puede ser negativo)
        payment_method: cash, credit, debit o pix
        client: Nombre del cliente ('Cliente General' si no se indicó)
    """
    id: str
    date: str
    items: List[CartItem] = field(default_factory=list)
    subtotal: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    payment_method: str = PaymentMethod.CASH.value
    client: str = DEFAULT_CLIENT

    @property
    def payment_label(self) -> str:
        method = PaymentMethod.parse(self.payment_method)
        return method.label if method else self.payment_method

    @property
    def short_id(self) -> str:
        """Número de pedido que se imprime en el recibo."""
        return self.id[-6:]

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia JSON."""
        return {
            'id': self.id,
            'date': self.date,
            'items': [item.to_dict() for item in self.items],
            'subtotal': self.subtotal,
            'discount': self.discount,
            'total': self.total,
            'payment_method': self.payment_method,
            'client': self.client,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sale':
        """
        Crea instancia desde diccionario.

        Ventas guardadas por versiones viejas pueden no traer subtotal ni
        descuento: el subtotal se recalcula desde los ítems y el
        descuento queda en 0.
        """
        items = [CartItem.from_dict(i) for i in data.get('items', [])]
        subtotal = _pick(data, 'subtotal')
        subtotal = items_subtotal(items) if subtotal is None else _to_float(subtotal)
        discount = _to_float(_pick(data, 'discount', default=0.0))
        total = _pick(data, 'total')
        total = round(subtotal - discount, 2) if total is None else _to_float(total)
        method = PaymentMethod.parse(_pick(data, 'payment_method', 'paymentMethod'))
        return cls(
            id=str(data.get('id', '')),
            date=data.get('date', ''),
            items=items,
            subtotal=subtotal,
            discount=discount,
            total=total,
            payment_method=method.value if method else PaymentMethod.CASH.value,
            client=_to_text(data.get('client')) or DEFAULT_CLIENT,
        )


@dataclass
class SuspendedSale:
    """
    Carrito apartado para retomarlo después.

    No guarda el descuento: al restaurar, el descuento vuelve a 0.
    """
    id: str
    date: str
    items: List[CartItem] = field(default_factory=list)
    client: str = SUSPENDED_UNKNOWN_CLIENT

    @property
    def total_items(self) -> int:
        return sum(item.qty for item in self.items)

    @property
    def total_value(self) -> float:
        return items_subtotal(self.items)

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia JSON."""
        return {
            'id': self.id,
            'date': self.date,
            'items': [item.to_dict() for item in self.items],
            'client': self.client,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SuspendedSale':
        """Crea instancia desde diccionario."""
        return cls(
            id=str(data.get('id', '')),
            date=data.get('date', ''),
            items=[CartItem.from_dict(i) for i in data.get('items', [])],
            client=_to_text(data.get('client')) or SUSPENDED_UNKNOWN_CLIENT,
        )


# ==============================================================================
# CONFIGURACIÓN DE LA TIENDA
# ==============================================================================

@dataclass
class AppSettings:
    """
    Datos de la empresa para el recibo y opciones de comportamiento.

    Attributes:
        company_name: Nombre que encabeza pantalla y recibo
        cnpj: Identificación fiscal de la empresa (opcional)
        address: Dirección (opcional)
        phone: Teléfono (opcional)
        receipt_footer: Mensaje al pie del recibo
        enable_stock_alerts: Avisar cuando un producto llega al stock mínimo
        sound_enabled: Tono de confirmación al agregar y al cobrar
        low_spec_mode: Menos animaciones (equipos lentos)
    """
    company_name: str = 'LS Utensílios e Variedades'
    cnpj: str = '00.000.000/0001-00'
    address: str = 'Rua Exemplo, 123 - Centro'
    phone: str = '(11) 99999-9999'
    receipt_footer: str = 'Obrigado pela preferência!'
    enable_stock_alerts: bool = True
    sound_enabled: bool = True
    low_spec_mode: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        return {
            'company_name': self.company_name,
            'cnpj': self.cnpj,
            'address': self.address,
            'phone': self.phone,
            'receipt_footer': self.receipt_footer,
            'enable_stock_alerts': self.enable_stock_alerts,
            'sound_enabled': self.sound_enabled,
            'low_spec_mode': self.low_spec_mode,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppSettings':
        """Crea instancia completando los campos que falten con el default."""
        defaults = cls()
        data = data or {}
        return cls(
            company_name=_to_text(_pick(data, 'company_name', 'companyName'), defaults.company_name),
            cnpj=_to_text(_pick(data, 'cnpj'), defaults.cnpj),
            address=_to_text(_pick(data, 'address'), defaults.address),
            phone=_to_text(_pick(data, 'phone'), defaults.phone),
            receipt_footer=_to_text(_pick(data, 'receipt_footer', 'receiptFooter'), defaults.receipt_footer),
            enable_stock_alerts=_to_bool(_pick(data, 'enable_stock_alerts', 'enableStockAlerts'), defaults.enable_stock_alerts),
            sound_enabled=_to_bool(_pick(data, 'sound_enabled', 'soundEnabled'), defaults.sound_enabled),
            low_spec_mode=_to_bool(_pick(data, 'low_spec_mode', 'lowSpecMode'), defaults.low_spec_mode),
        )


# Catálogo de demostración (solo fuera de PRODUCTION_MODE)
INITIAL_PRODUCTS = [
    Product('7891000100015', 'Garrafa Térmica Inox 1L', 49.90, 25.00, 20, 5, 'cozinha'),
    Product('7891000100022', 'Kit Potes Herméticos 5un', 89.90, 45.00, 12, 3, 'organizadores'),
    Product('7891000100039', 'Mop Giratório 360', 65.00, 35.00, 15, 5, 'limpeza'),
    Product('7891000100046', 'Jogo de Facas 6 Peças', 39.90, 18.00, 30, 10, 'cozinha'),
    Product('7891000100053', 'Vaso Decorativo Cerâmica', 29.90, 12.00, 8, 2, 'decoração'),
]
