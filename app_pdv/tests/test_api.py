import httpx

from app_pdv.main import create_app


def _create(client, barcode, name, price=10, stock=5, min_stock=2):
    r = client.post('/api/productos', json={
        'barcode': barcode, 'name': name, 'price': price, 'stock': stock, 'min_stock': min_stock,
    })
    assert r.status_code in (200, 201), r.get_json()
    return r.get_json()['product']


def test_checkout_flow(client):
    _create(client, 'A', 'Produto A', price=10, stock=5)

    r = client.post('/api/carrito/agregar', json={'barcode': 'A'})
    assert r.status_code == 200
    assert r.get_json()['feedback'] == ['confirm']
    client.post('/api/carrito/agregar', json={'barcode': 'A'})

    r = client.post('/api/carrito/pago', json={'payment_method': 'cash', 'cash_received': '20', 'discount': 5})
    cart = r.get_json()['carrito']
    assert cart['subtotal'] == 20
    assert cart['total'] == 15
    assert cart['change'] == 5

    r = client.post('/api/venta/finalizar')
    body = r.get_json()
    assert r.status_code == 200
    assert body['sale']['total'] == 15
    assert body['change'] == 5
    assert body['carrito']['items'] == []

    r = client.get('/api/inventario')
    assert r.get_json()['products'][0]['stock'] == 3

    r = client.get('/api/ventas')
    assert len(r.get_json()['sales']) == 1


def test_insufficient_payment_is_400(client):
    _create(client, 'A', 'Produto A', price=10)
    client.post('/api/carrito/agregar', json={'barcode': 'A'})

    r = client.post('/api/venta/finalizar', json={'payment_method': 'cash', 'cash_received': '5'})

    assert r.status_code == 400
    assert r.get_json()['code'] == 'insufficient_payment'
    assert len(r.get_json()['carrito']['items']) == 1


def test_out_of_stock_and_unknown_barcode(client):
    _create(client, 'Z', 'Zerado', stock=0)

    r = client.post('/api/carrito/agregar', json={'barcode': 'Z'})
    assert r.status_code == 400
    assert r.get_json()['code'] == 'out_of_stock'

    r = client.post('/api/carrito/agregar', json={'barcode': 'nada'})
    assert r.status_code == 404


def test_cart_quantity_and_remove(client):
    _create(client, 'A', 'Uno')
    _create(client, 'B', 'Dos')
    client.post('/api/carrito/agregar', json={'barcode': 'A'})
    client.post('/api/carrito/agregar', json={'barcode': 'B'})

    r = client.post('/api/carrito/cantidad', json={'index': 0, 'qty': 4})
    assert r.get_json()['carrito']['items'][0]['qty'] == 4

    r = client.post('/api/carrito/eliminar', json={'index': 1})
    assert [i['barcode'] for i in r.get_json()['carrito']['items']] == ['A']

    r = client.post('/api/carrito/cantidad', json={'index': 0, 'qty': 'x'})
    assert r.status_code == 400


def test_scan_contract(client):
    _create(client, '7890011', 'Garrafa Azul')
    _create(client, '7890022', 'Garrafa Verde')

    r = client.post('/api/productos/escanear', json={'text': '7890011'})
    assert r.get_json()['action'] == 'add'

    r = client.post('/api/productos/escanear', json={'text': 'verde'})
    assert r.get_json()['action'] == 'add'
    assert [i['barcode'] for i in r.get_json()['carrito']['items']] == ['7890011', '7890022']

    r = client.post('/api/productos/escanear', json={'text': '555'})
    body = r.get_json()
    assert body['action'] == 'create'
    assert body['product_defaults'] == {'barcode': '555', 'min_stock': 5, 'category': 'diversos'}


def test_search_endpoint(client):
    _create(client, '7890011', 'Garrafa Azul')

    r = client.get('/api/productos/buscar?q=azul')

    assert [p['barcode'] for p in r.get_json()['products']] == ['7890011']


def test_product_validation_and_delete(client):
    r = client.post('/api/productos', json={'barcode': '', 'name': 'x'})
    assert r.status_code == 400
    assert r.get_json()['code'] == 'invalid_product'

    _create(client, 'A', 'Uno')
    assert client.delete('/api/productos/A').status_code == 200
    assert client.delete('/api/productos/A').status_code == 404


def test_alerts_endpoint(client):
    _create(client, 'A', 'Uno', stock=1, min_stock=2)
    _create(client, 'B', 'Dos', stock=9, min_stock=2)

    r = client.get('/api/inventario/alertas')

    assert [p['barcode'] for p in r.get_json()['products']] == ['A']


def test_suspend_and_restore_flow(client):
    _create(client, 'A', 'Uno')
    _create(client, 'B', 'Dos')
    client.post('/api/carrito/agregar', json={'barcode': 'A'})

    r = client.post('/api/venta/suspender', json={'client_name': 'Ana'})
    suspended_id = r.get_json()['suspended']['id']
    assert r.get_json()['carrito']['items'] == []

    r = client.get('/api/suspendidas')
    assert r.get_json()['suspended'][0]['client'] == 'Ana'

    client.post('/api/carrito/agregar', json={'barcode': 'B'})
    r = client.post(f'/api/suspendidas/{suspended_id}/restaurar', json={})
    assert r.status_code == 409

    r = client.post(f'/api/suspendidas/{suspended_id}/restaurar', json={'confirm': True})
    assert r.status_code == 200
    assert [i['barcode'] for i in r.get_json()['carrito']['items']] == ['A']
    assert r.get_json()['carrito']['client_name'] == 'Ana'

    assert client.get('/api/suspendidas').get_json()['suspended'] == []
    assert client.delete(f'/api/suspendidas/{suspended_id}').get_json()['deleted'] is False


def test_suspend_empty_cart(client):
    r = client.post('/api/venta/suspender')
    assert r.status_code == 400
    assert r.get_json()['code'] == 'empty_cart'


def test_failed_suspend_keeps_client_name(client):
    r = client.post('/api/venta/suspender', json={'client_name': 'Maria'})

    assert r.status_code == 400
    assert r.get_json()['carrito']['client_name'] == ''
    assert client.get('/api/carrito').get_json()['carrito']['client_name'] == ''


def test_restore_unknown_id_is_404_even_with_items(client):
    _create(client, 'A', 'Uno')
    client.post('/api/carrito/agregar', json={'barcode': 'A'})

    r = client.post('/api/suspendidas/nada/restaurar', json={})

    assert r.status_code == 404
    assert len(r.get_json()['carrito']['items']) == 1


def test_cancel_needs_confirmation(client):
    _create(client, 'A', 'Uno')
    client.post('/api/carrito/agregar', json={'barcode': 'A'})

    assert client.post('/api/venta/cancelar').status_code == 409
    assert client.post('/api/venta/cancelar', json={'confirm': 'false'}).status_code == 409
    r = client.post('/api/venta/cancelar', json={'confirm': True})
    assert r.status_code == 200
    assert r.get_json()['carrito']['items'] == []


def test_cancel_empty_cart_needs_no_confirmation(client):
    r = client.post('/api/venta/cancelar')
    assert r.status_code == 200
    assert r.get_json()['ok'] is True


def test_null_barcode_is_rejected(client):
    r = client.post('/api/productos', json={'barcode': None, 'name': None, 'price': 1})
    assert r.status_code == 400
    assert r.get_json()['code'] == 'invalid_product'

    r = client.post('/api/carrito/agregar', json={'barcode': None})
    assert r.status_code == 404
    assert r.get_json()['carrito']['items'] == []


def test_receipt_endpoint(client):
    _create(client, 'A', 'Uno', price=3)
    client.post('/api/carrito/agregar', json={'barcode': 'A'})
    sale = client.post('/api/venta/finalizar', json={'payment_method': 'debit'}).get_json()['sale']

    r = client.get(f"/api/ventas/{sale['id']}/recibo")

    assert r.status_code == 200
    assert r.mimetype == 'text/html'
    assert f"Pedido #{sale['id'][-6:]}" in r.get_data(as_text=True)
    assert client.get('/api/ventas/000/recibo').status_code == 404


def test_reports_endpoint(client):
    _create(client, 'A', 'Uno', price=8)
    client.post('/api/carrito/agregar', json={'barcode': 'A'})
    client.post('/api/venta/finalizar', json={'payment_method': 'pix'})

    report = client.get('/api/reportes').get_json()['report']

    assert report['sales_count'] == 1
    assert report['by_payment']['pix'] == 8


def test_settings_endpoint(client):
    r = client.post('/api/configuracion', json={'company_name': 'Loja Nova', 'sound_enabled': False})
    assert r.get_json()['settings']['company_name'] == 'Loja Nova'

    assert client.get('/api/configuracion').get_json()['settings']['sound_enabled'] is False

    _create(client, 'A', 'Uno')
    r = client.post('/api/carrito/agregar', json={'barcode': 'A'})
    assert r.get_json()['feedback'] == []


def test_shortcuts(client):
    assert client.post('/api/atajos/f2').get_json()['action'] == 'focus_search'

    _create(client, 'A', 'Uno', price=4)
    client.post('/api/carrito/agregar', json={'barcode': 'A'})
    client.post('/api/carrito/pago', json={'payment_method': 'pix'})
    r = client.post('/api/atajos/F9')
    assert r.status_code == 200
    assert r.get_json()['sale']['total'] == 4

    assert client.post('/api/atajos/F5').status_code == 404


def test_insights_without_key(client):
    r = client.post('/api/insights')
    assert r.status_code == 202
    assert r.get_json()['insight']['state'] == 'error'
    assert client.get('/api/insights').get_json()['insight']['state'] == 'error'


def test_insights_with_mock_transport(settings):
    def handler(request):
        return httpx.Response(200, json={'candidates': [{'content': {'parts': [{'text': 'Dica'}]}}]})

    app = create_app(dict(settings, AI_API_KEY='k', AI_TRANSPORT=httpx.MockTransport(handler)))
    client = app.test_client()
    _create(client, 'A', 'Uno')
    client.post('/api/carrito/agregar', json={'barcode': 'A'})
    client.post('/api/venta/finalizar', json={'payment_method': 'pix'})

    client.post('/api/insights')
    app.extensions['app_pdv'].insight_service.current().wait(5)

    insight = client.get('/api/insights').get_json()['insight']
    assert insight['state'] == 'ready'
    assert insight['text'] == 'Dica'


def test_unknown_route_is_json(client):
    r = client.get('/api/nada')
    assert r.status_code == 404
    assert r.get_json()['ok'] is False


def test_unexpected_error_in_checkout_is_json_500(app, client, monkeypatch):
    container = app.extensions['app_pdv']

    def boom(session):
        raise RuntimeError('fallo')

    monkeypatch.setattr(container.checkout_service, 'finalize', boom)

    r = client.post('/api/venta/finalizar')

    assert r.status_code == 500
    assert r.get_json()['code'] == 'server_error'
