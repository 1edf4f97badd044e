# ==============================================================================
# APP PDV - Punto de venta de una sola caja
# ==============================================================================
# Catálogo por código de barras, carrito, cobro (efectivo, crédito,
# débito, pix), historial, ventas suspendidas y recibos.
# Todos los datos se guardan en archivos JSON locales.
# ==============================================================================

__version__ = '3.0.0'
