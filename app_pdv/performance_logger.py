# ==============================================================================
# LOGS DEL SISTEMA Y PROFILING
# ==============================================================================
# logs/app.log          → eventos: [INFO], [ADVERTENCIA], [ERROR]
# logs/performance.log  → una línea por request (tiempo y acción)
# logs/slow.log         → requests y funciones que superan los umbrales
#
# Los eventos también se imprimen en consola con su etiqueta.
# ACTIVAR/DESACTIVAR profiling: PDV_ENABLE_PROFILING (config.py)
# ==============================================================================

import os
import threading
import time
from contextlib import contextmanager
from datetime import datetime
from functools import wraps

from app_pdv import config

ENABLE_PROFILING = config.ENABLE_PROFILING

# Directorio de logs (create_app y los tests lo cambian)
LOGS_DIR = config.LOGS_DIR

# Umbrales en milisegundos
SLOW_MS = 300
CRITICAL_MS = 700

LEVELS = ('INFO', 'ADVERTENCIA', 'ERROR')

# Regla Flask → acción tal como la nombra el operador
ROUTE_NAMES = {
    # Catálogo
    'GET /api/productos/buscar': 'Buscar producto',
    'POST /api/productos/escanear': 'Escanear código de barras',
    'POST /api/productos': 'Guardar producto',
    'DELETE /api/productos/<barcode>': 'Eliminar producto',
    'GET /api/inventario': 'Ver inventario',
    'GET /api/inventario/alertas': 'Ver alertas de stock',

    # Carrito
    'GET /api/carrito': 'Ver carrito',
    'POST /api/carrito/agregar': 'Agregar al carrito',
    'POST /api/carrito/eliminar': 'Eliminar del carrito',
    'POST /api/carrito/cantidad': 'Cambiar cantidad',
    'POST /api/carrito/pago': 'Datos de pago',

    # Venta
    'POST /api/venta/finalizar': 'Finalizar venta',
    'POST /api/venta/suspender': 'Suspender venta',
    'POST /api/venta/cancelar': 'Cancelar venta',

    # Ventas suspendidas
    'GET /api/suspendidas': 'Ver ventas suspendidas',
    'POST /api/suspendidas/<sale_id>/restaurar': 'Restaurar venta suspendida',
    'DELETE /api/suspendidas/<sale_id>': 'Eliminar venta suspendida',

    # Historial y reportes
    'GET /api/ventas': 'Ver historial de ventas',
    'GET /api/ventas/<sale_id>/recibo': 'Imprimir recibo',
    'GET /api/reportes': 'Ver reporte de ventas',
    'POST /api/insights': 'Pedir análisis IA',
    'GET /api/insights': 'Ver análisis IA',
    'DELETE /api/insights': 'Cancelar análisis IA',

    # Configuración
    'GET /api/configuracion': 'Ver configuración',
    'POST /api/configuracion': 'Guardar configuración',

    # Atajos de teclado
    'POST /api/atajos/<key>': 'Atajo de teclado',
}

_io_lock = threading.Lock()
_stats_lock = threading.Lock()

# {nombre: [llamadas, ms_total, ms_max]}
_stats = {}


def configure_logs_dir(path):
    """Cambia el directorio donde se escriben los logs."""
    global LOGS_DIR
    LOGS_DIR = path


def _now():
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def _append(filename, line):
    """Agrega una línea al log. Si el disco falla, se pierde la línea y nada más."""
    try:
        with _io_lock:
            os.makedirs(LOGS_DIR, exist_ok=True)
            with open(os.path.join(LOGS_DIR, filename), 'a', encoding='utf-8') as f:
                f.write(line + '\n')
    except OSError:
        pass


# ═══════════════════════════════════════════════════════════════════════════
# EVENTOS
# ═══════════════════════════════════════════════════════════════════════════

def log_event(level, message):
    """
    Registra un evento del sistema.

    Args:
        level: 'INFO', 'ADVERTENCIA' o 'ERROR' (otro valor cuenta como INFO)
        message: Texto del evento
    """
    if level not in LEVELS:
        level = 'INFO'
    print(f"[{level}] {message}")
    _append('app.log', f"{_now()} [{level}] {message}")


# ═══════════════════════════════════════════════════════════════════════════
# MEDICIÓN
# ═══════════════════════════════════════════════════════════════════════════

def _severity(elapsed_ms):
    if elapsed_ms >= CRITICAL_MS:
        return 'CRÍTICO'
    if elapsed_ms >= SLOW_MS:
        return 'LENTO'
    return None


def _record(name, elapsed_ms):
    with _stats_lock:
        entry = _stats.setdefault(name, [0, 0.0, 0.0])
        entry[0] += 1
        entry[1] += elapsed_ms
        entry[2] = max(entry[2], elapsed_ms)


@contextmanager
def measure(name):
    """
    Mide el bloque y lo suma a las estadísticas de `name`.
    Si supera SLOW_MS queda en slow.log.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        _record(name, elapsed_ms)
        severity = _severity(elapsed_ms)
        if severity:
            _append('slow.log', f"{_now()} [{severity}] función {name}: {elapsed_ms:.0f} ms")


def profile_function(func=None, name=None):
    """
    Decorador para medir operaciones clave de la caja.

    Uso:
        @profile_function
        def restore(...): ...

        @profile_function(name='Finalizar venta')
        def finalize(...): ...

    Con el profiling desactivado devuelve la función sin tocar.
    """
    def decorator(fn):
        if not ENABLE_PROFILING:
            return fn
        label = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            with measure(label):
                return fn(*args, **kwargs)
        return wrapper

    return decorator(func) if func is not None else decorator


def get_function_stats():
    """
    Estadísticas de las funciones medidas.

    Returns:
        dict: {nombre: {calls, avg_time, max_time}} en milisegundos
    """
    with _stats_lock:
        return {
            label: {
                'calls': calls,
                'avg_time': round(total / calls, 2) if calls else 0,
                'max_time': round(peak, 2),
            }
            for label, (calls, total, peak) in _stats.items()
        }


def reset_stats():
    with _stats_lock:
        _stats.clear()


# ═══════════════════════════════════════════════════════════════════════════
# RUTAS FLASK
# ═══════════════════════════════════════════════════════════════════════════

def route_label(method, rule):
    """Nombre legible de la ruta (o 'MÉTODO /regla' si no está en ROUTE_NAMES)."""
    return ROUTE_NAMES.get(f"{method} {rule}", f"{method} {rule}")


def init_profiling(app, enabled=None):
    """
    Registra hooks before/after request que escriben performance.log
    y, para requests lentos, slow.log.

    Args:
        enabled: Sobrescribe ENABLE_PROFILING para esta app
    """
    if not (ENABLE_PROFILING if enabled is None else enabled):
        return

    from flask import g, request

    @app.before_request
    def _profiling_start():
        g.profiling_start = time.perf_counter()

    @app.after_request
    def _profiling_stop(response):
        start = g.pop('profiling_start', None)
        if start is None or request.path.startswith('/static'):
            return response

        elapsed_ms = (time.perf_counter() - start) * 1000
        rule = request.url_rule.rule if request.url_rule else request.path
        label = route_label(request.method, rule)

        _append('performance.log', f"{_now()} | {elapsed_ms:6.0f} ms | {label} | {request.method} {request.path} | {response.status_code}")
        severity = _severity(elapsed_ms)
        if severity:
            _append('slow.log', f"{_now()} [{severity}] ruta {label} ({request.method} {request.path}): {elapsed_ms:.0f} ms")
        return response


__all__ = [
    'ENABLE_PROFILING',
    'configure_logs_dir',
    'log_event',
    'measure',
    'init_profiling',
    'profile_function',
    'get_function_stats',
    'reset_stats',
]
