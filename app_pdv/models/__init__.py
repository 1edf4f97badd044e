# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Este módulo define todas las entidades del dominio usando dataclasses.
# Los repositorios guardan diccionarios JSON; los servicios trabajan con
# estas entidades y convierten con to_dict()/from_dict().
# ==============================================================================

from .entities import (
    # Catálogo
    Product,
    CATEGORIES,
    DEFAULT_CATEGORY,
    INITIAL_PRODUCTS,

    # Carrito y ventas
    CartItem,
    Sale,
    SuspendedSale,
    PaymentMethod,
    DEFAULT_CLIENT,
    SUSPENDED_UNKNOWN_CLIENT,
    items_subtotal,
    new_record_id,
    utc_now_iso,

    # Configuración
    AppSettings,
)

__all__ = [
    'Product',
    'CATEGORIES',
    'DEFAULT_CATEGORY',
    'INITIAL_PRODUCTS',
    'CartItem',
    'Sale',
    'SuspendedSale',
    'PaymentMethod',
    'DEFAULT_CLIENT',
    'SUSPENDED_UNKNOWN_CLIENT',
    'items_subtotal',
    'new_record_id',
    'utc_now_iso',
    'AppSettings',
]
