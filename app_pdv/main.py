from flask import Blueprint, Flask, Response, current_app, request

# Sistema de logs y profiling interno
from app_pdv import config
from app_pdv.performance_logger import configure_logs_dir, init_profiling, log_event

# Sistema de backups automáticos
from app_pdv.services.backup_service import run_startup_backup

# ═══════════════════════════════════════════════════════════════════════════
# CONTENEDOR DE DEPENDENCIAS - Servicios y Repositorios
# ═══════════════════════════════════════════════════════════════════════════
# Las rutas solo traducen HTTP ↔ servicios. La lógica vive en services/.
# ═══════════════════════════════════════════════════════════════════════════
from app_pdv.app_container import AppContainer
from app_pdv.models import CATEGORIES, DEFAULT_CATEGORY, Product, Sale

bp = Blueprint('pdv', __name__)

# Código de error → código HTTP (el resto de errores de validación = 400)
ERROR_STATUS = {
    'not_found': 404,
    'needs_confirmation': 409,
}


# ═══════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def get_container() -> AppContainer:
    """Contenedor de la aplicación actual."""
    return current_app.extensions['app_pdv']


def to_int(value, default=None):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def request_data():
    """JSON del request (dict vacío si no llegó o no es un objeto)."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def product_json(product: Product):
    return {**product.to_dict(), 'is_low_stock': product.is_low_stock}


def sale_json(sale: Sale):
    return {**sale.to_dict(), 'payment_label': sale.payment_label, 'order_number': sale.short_id}


def respond(result, status=200, **extra):
    """
    Arma la respuesta JSON de una operación.

    - ok False → 400 (404 not_found, 409 needs_confirmation)
    - Siempre incluye el carrito actual y los sonidos pendientes
    """
    container = get_container()
    body = {'ok': result.get('ok', True)}
    if not body['ok']:
        body['error'] = result.get('error', 'Operación inválida')
        body['code'] = result.get('code', 'invalid')
        status = ERROR_STATUS.get(body['code'], 400)
    body.update(extra)
    body['carrito'] = container.cart_service.get_cart(container.session)
    body['feedback'] = container.feedback_service.drain()
    return body, status


def needs_confirmation(message):
    """
    Confirmación de las acciones que descartan el carrito actual: si hay líneas y
    el request no trae confirm: true, no se toca nada y se responde 409.
    """
    session = get_container().session
    if session.is_empty or request_data().get('confirm') is True:
        return None
    return respond({'ok': False, 'code': 'needs_confirmation', 'error': message})


def server_error(action, error):
    """Error inesperado en una operación de caja: log + JSON 500."""
    log_event('ERROR', f"{action}: {error}")
    return {'ok': False, 'code': 'server_error', 'error': f'Error interno al {action.lower()}'}, 500


# ═══════════════════════════════════════════════════════════════════════════
# CATÁLOGO
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/productos/buscar', methods=['GET'])
def api_productos_buscar():
    """Búsqueda rápida (máximo 5 resultados)."""
    query = request.args.get('q', '')
    products = get_container().catalog_service.search(query)
    return {'ok': True, 'products': [product_json(p) for p in products]}


@bp.route('/api/productos/escanear', methods=['POST'])
def api_productos_escanear():
    """
    Texto enviado desde el campo de búsqueda (Enter o lector).
    Código exacto o único resultado → se agrega al carrito.
    Si no → la pantalla ofrece crear el producto con ese código.
    """
    container = get_container()
    decision = container.catalog_service.resolve_submission(str(request_data().get('text') or ''))

    if decision['action'] == 'add':
        result = container.cart_service.add(container.session, decision['product'])
        return respond(result, action='add', product=product_json(decision['product']))

    if decision['action'] == 'create':
        return respond(
            {'ok': True},
            action='create',
            product_defaults={
                'barcode': decision['barcode'],
                'min_stock': 5,
                'category': DEFAULT_CATEGORY,
            },
            matches=[product_json(p) for p in decision['matches']],
        )

    return respond({'ok': True}, action='none')


@bp.route('/api/productos', methods=['POST'])
def api_productos_guardar():
    """Crear o reemplazar un producto."""
    result = get_container().catalog_service.upsert(request_data())
    if not result['ok']:
        return {'ok': False, 'code': result['code'], 'error': result['error']}, 400
    return {'ok': True, 'product': product_json(result['product'])}, 201 if result['created'] else 200


@bp.route('/api/productos/<barcode>', methods=['DELETE'])
def api_productos_eliminar(barcode):
    result = get_container().catalog_service.delete(barcode)
    if not result['ok']:
        return {'ok': False, 'code': result['code'], 'error': result['error']}, 404
    return {'ok': True, 'product': product_json(result['product'])}


@bp.route('/api/inventario', methods=['GET'])
def api_inventario():
    """Inventario: stock bajo primero, luego por nombre."""
    products = get_container().catalog_service.list_inventory(request.args.get('q', ''))
    return {
        'ok': True,
        'products': [product_json(p) for p in products],
        'categories': CATEGORIES,
    }


@bp.route('/api/inventario/alertas', methods=['GET'])
def api_inventario_alertas():
    products = get_container().catalog_service.low_stock_products()
    return {'ok': True, 'products': [product_json(p) for p in products]}


# ═══════════════════════════════════════════════════════════════════════════
# CARRITO
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/carrito', methods=['GET'])
def api_carrito():
    return respond({'ok': True})


@bp.route('/api/carrito/agregar', methods=['POST'])
def api_carrito_agregar():
    """Agregar una unidad por código de barras exacto."""
    container = get_container()
    barcode = str(request_data().get('barcode') or '').strip()
    if not barcode:
        return respond({'ok': False, 'code': 'not_found', 'error': 'Código de barras vacío'})
    return respond(container.cart_service.add_by_barcode(container.session, barcode))


@bp.route('/api/carrito/eliminar', methods=['POST'])
def api_carrito_eliminar():
    container = get_container()
    index = to_int(request_data().get('index'), -1)
    return respond(container.cart_service.remove(container.session, index))


@bp.route('/api/carrito/cantidad', methods=['POST'])
def api_carrito_cantidad():
    container = get_container()
    data = request_data()
    index = to_int(data.get('index'), -1)
    qty = to_int(data.get('qty'))
    if qty is None:
        return respond({'ok': False, 'code': 'invalid_quantity', 'error': 'Cantidad inválida'})
    return respond(container.cart_service.set_quantity(container.session, index, qty))


@bp.route('/api/carrito/pago', methods=['POST'])
def api_carrito_pago():
    """Método de pago, efectivo recibido, descuento y cliente."""
    container = get_container()
    data = request_data()
    result = container.cart_service.set_payment_inputs(
        container.session,
        payment_method=data.get('payment_method'),
        cash_received=data.get('cash_received'),
        discount=data.get('discount'),
        client_name=data.get('client_name'),
    )
    return respond(result)


# ═══════════════════════════════════════════════════════════════════════════
# VENTA (finalizar / suspender / cancelar)
# ═══════════════════════════════════════════════════════════════════════════

def finalize_current_sale():
    container = get_container()
    result = container.checkout_service.finalize(container.session)
    if not result['ok']:
        return respond(result)
    return respond(result, sale=sale_json(result['sale']), change=result['change'], skipped=result['skipped'])


@bp.route('/api/venta/finalizar', methods=['POST'])
def api_venta_finalizar():
    """
    Finaliza la venta con los datos de pago actuales.
    Acepta los mismos campos que /api/carrito/pago para enviarlos juntos.
    """
    container = get_container()
    data = request_data()
    try:
        if data:
            result = container.cart_service.set_payment_inputs(
                container.session,
                payment_method=data.get('payment_method'),
                cash_received=data.get('cash_received'),
                discount=data.get('discount'),
                client_name=data.get('client_name'),
            )
            if not result['ok']:
                return respond(result)
        return finalize_current_sale()
    except Exception as e:
        return server_error('Finalizar venta', e)


@bp.route('/api/venta/suspender', methods=['POST'])
def api_venta_suspender():
    container = get_container()
    data = request_data()
    try:
        client_name = str(data.get('client_name') or '') if 'client_name' in data else None
        result = container.checkout_service.suspend(container.session, client_name=client_name)
        if not result['ok']:
            return respond(result)
        return respond(result, suspended=result['suspended'].to_dict())
    except Exception as e:
        return server_error('Suspender venta', e)


@bp.route('/api/venta/cancelar', methods=['POST'])
def api_venta_cancelar():
    container = get_container()
    try:
        pending = needs_confirmation('¿Cancelar la venta actual? Se perderán los productos del carrito')
        if pending:
            return pending
        return respond(container.checkout_service.cancel(container.session))
    except Exception as e:
        return server_error('Cancelar venta', e)


# ═══════════════════════════════════════════════════════════════════════════
# VENTAS SUSPENDIDAS
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/suspendidas', methods=['GET'])
def api_suspendidas():
    items = get_container().suspended_service.list_suspended()
    return {
        'ok': True,
        'suspended': [
            {**s.to_dict(), 'total_items': s.total_items, 'total_value': s.total_value}
            for s in items
        ],
    }


@bp.route('/api/suspendidas/<sale_id>/restaurar', methods=['POST'])
def api_suspendidas_restaurar(sale_id):
    container = get_container()
    if container.suspended_service.get(sale_id) is None:
        return respond({'ok': False, 'code': 'not_found', 'error': 'Venta suspendida no encontrada'})
    pending = needs_confirmation('El carrito actual será reemplazado. ¿Continuar?')
    if pending:
        return pending
    return respond(container.suspended_service.restore(container.session, sale_id))


@bp.route('/api/suspendidas/<sale_id>', methods=['DELETE'])
def api_suspendidas_eliminar(sale_id):
    result = get_container().suspended_service.delete(sale_id)
    return {'ok': True, 'deleted': result['deleted']}


# ═══════════════════════════════════════════════════════════════════════════
# HISTORIAL Y REPORTES
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/ventas', methods=['GET'])
def api_ventas():
    """Historial filtrado por texto (ID o cliente) y fecha YYYY-MM-DD."""
    sales = get_container().report_service.history(
        term=request.args.get('q', ''),
        date=request.args.get('fecha', ''),
    )
    return {'ok': True, 'sales': [sale_json(s) for s in sales]}


@bp.route('/api/ventas/<sale_id>/recibo', methods=['GET'])
def api_ventas_recibo(sale_id):
    """Recibo imprimible (también para reimprimir desde el historial)."""
    container = get_container()
    sale = container.report_service.get_sale(sale_id)
    if sale is None:
        return {'ok': False, 'code': 'not_found', 'error': 'Venta no encontrada'}, 404
    html = container.receipt_service.render_html(sale, container.settings_repo.load())
    return Response(html, mimetype='text/html')


@bp.route('/api/reportes', methods=['GET'])
def api_reportes():
    return {'ok': True, 'report': get_container().report_service.summary()}


# ═══════════════════════════════════════════════════════════════════════════
# ANÁLISIS CON IA
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/insights', methods=['POST'])
def api_insights_pedir():
    container = get_container()
    summary = container.report_service.recent_for_insight(container.config['AI_MAX_SALES'])
    task = container.insight_service.start(summary)
    return {'ok': True, 'insight': task.to_dict()}, 202


@bp.route('/api/insights', methods=['GET'])
def api_insights_ver():
    task = get_container().insight_service.current()
    return {'ok': True, 'insight': task.to_dict() if task else None}


@bp.route('/api/insights', methods=['DELETE'])
def api_insights_cancelar():
    container = get_container()
    cancelled = container.insight_service.cancel()
    task = container.insight_service.current()
    return {'ok': True, 'cancelled': cancelled, 'insight': task.to_dict() if task else None}


# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/configuracion', methods=['GET'])
def api_configuracion_ver():
    return {'ok': True, 'settings': get_container().settings_repo.load().to_dict()}


@bp.route('/api/configuracion', methods=['POST'])
def api_configuracion_guardar():
    settings = get_container().settings_repo.update_fields(request_data())
    log_event('INFO', 'Configuración de la tienda actualizada')
    return {'ok': True, 'settings': settings.to_dict()}


# ═══════════════════════════════════════════════════════════════════════════
# ATAJOS DE TECLADO
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/atajos/<key>', methods=['POST'])
def api_atajos(key):
    """F2 → foco en la búsqueda, F9 → finalizar venta."""
    key = key.upper()
    if key == 'F2':
        return {'ok': True, 'action': 'focus_search'}
    if key == 'F9':
        try:
            return finalize_current_sale()
        except Exception as e:
            return server_error('Finalizar venta', e)
    return {'ok': False, 'code': 'not_found', 'error': f'Atajo desconocido: {key}'}, 404


# ═══════════════════════════════════════════════════════════════════════════
# FÁBRICA DE LA APLICACIÓN
# ═══════════════════════════════════════════════════════════════════════════

def create_app(overrides=None):
    """
    Crea la aplicación Flask de la caja.

    Args:
        overrides: Claves de configuración a reemplazar (tests: DATA_DIR,
                   LOGS_DIR en un directorio temporal, etc.)
    """
    app = Flask(__name__)
    app.config.update(config.as_dict())
    app.config.update(overrides or {})
    app.json.ensure_ascii = False

    configure_logs_dir(app.config['LOGS_DIR'])

    # Mide rendimiento de rutas y funciones. Logs en LOGS_DIR
    init_profiling(app, enabled=app.config['ENABLE_PROFILING'])

    settings = {key: app.config[key] for key in config.as_dict()}
    settings['AI_TRANSPORT'] = app.config.get('AI_TRANSPORT')
    container = AppContainer(settings)
    app.extensions['app_pdv'] = container
    app.register_blueprint(bp)

    @app.errorhandler(404)
    def _not_found(error):
        return {'ok': False, 'code': 'not_found', 'error': 'Ruta no encontrada'}, 404

    @app.errorhandler(405)
    def _method_not_allowed(error):
        return {'ok': False, 'code': 'method_not_allowed', 'error': 'Método no permitido'}, 405

    if app.config['BACKUP_ON_STARTUP']:
        run_startup_backup(container.data_dir, app.config['MAX_BACKUPS'])

    log_event('INFO', f"Caja iniciada (datos en {container.data_dir})")
    return app


if __name__ == "__main__":
    # Desarrollo local y acceso desde la red de la tienda.
    # En producción usar WSGI (gunicorn wsgi:app)
    app = create_app()

    if not config.DEBUG:
        print(f"\n{'='*50}")
        print(f"  Servidor iniciado en http://{config.HOST}:{config.PORT}")
        print(f"  Acceso local: http://localhost:{config.PORT}")
        print(f"{'='*50}\n")

    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)
