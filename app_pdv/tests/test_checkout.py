from app_pdv.models import DEFAULT_CLIENT

from .conftest import add_product


def test_cash_sale_with_discount_and_change(container):
    product = add_product(container, 'A', 'Produto A', price=10, stock=5)
    session = container.session
    cart = container.cart_service

    cart.add(session, product)
    cart.add(session, product)
    assert [(i.barcode, i.qty) for i in session.lines] == [('A', 2)]
    assert cart.subtotal(session) == 20

    cart.set_payment_inputs(session, discount=5)
    assert cart.total(session) == 15

    cart.set_payment_inputs(session, payment_method='cash', cash_received='20')
    assert cart.change(session) == 5

    result = container.checkout_service.finalize(session)

    assert result['ok']
    assert result['change'] == 5
    assert container.catalog_service.lookup_exact('A').stock == 3
    sales = container.sales_repo.load()
    assert len(sales) == 1
    assert sales[0]['total'] == 15
    assert sales[0]['subtotal'] == 20
    assert sales[0]['discount'] == 5
    assert sales[0]['payment_method'] == 'cash'
    assert sales[0]['items'][0]['qty'] == 2
    assert session.lines == []


def test_finalize_resets_transient_inputs_but_keeps_method(container):
    product = add_product(container, 'A', 'Produto A', price=10)
    session = container.session
    container.cart_service.add(session, product)
    container.cart_service.set_payment_inputs(
        session, payment_method='debit', discount=1, client_name='Maria'
    )

    result = container.checkout_service.finalize(session)

    assert result['sale'].client == 'Maria'
    assert session.discount == 0
    assert session.client_name == ''
    assert session.cash_received == ''
    assert session.payment_method.value == 'debit'


def test_insufficient_cash_changes_nothing(container):
    product = add_product(container, 'A', 'Produto A', price=10, stock=5)
    session = container.session
    container.cart_service.add(session, product)
    container.cart_service.set_payment_inputs(session, payment_method='cash', cash_received='9.99')

    result = container.checkout_service.finalize(session)

    assert result['ok'] is False
    assert result['code'] == 'insufficient_payment'
    assert container.catalog_service.lookup_exact('A').stock == 5
    assert container.sales_repo.load() == []
    assert len(session.lines) == 1
    assert session.cash_received == '9.99'


def test_card_payment_does_not_need_cash(container):
    product = add_product(container, 'A', 'Produto A', price=10)
    session = container.session
    container.cart_service.add(session, product)
    container.cart_service.set_payment_inputs(session, payment_method='credit')

    result = container.checkout_service.finalize(session)

    assert result['ok']
    assert result['change'] == 0
    assert result['sale'].client == DEFAULT_CLIENT


def test_finalize_empty_cart(container):
    result = container.checkout_service.finalize(container.session)
    assert result['code'] == 'empty_cart'
    assert container.sales_repo.load() == []


def test_finalize_skips_products_removed_from_catalog(container):
    a = add_product(container, 'A', 'Produto A', price=10, stock=5)
    b = add_product(container, 'B', 'Produto B', price=4, stock=5)
    session = container.session
    container.cart_service.add(session, a)
    container.cart_service.add(session, b)
    container.catalog_service.delete('B')
    container.cart_service.set_payment_inputs(session, payment_method='pix')

    result = container.checkout_service.finalize(session)

    assert result['ok']
    assert result['skipped'] == ['B']
    assert container.catalog_service.lookup_exact('A').stock == 4
    assert container.catalog_service.lookup_exact('B') is None
    sale = container.sales_repo.load()[0]
    assert [i['barcode'] for i in sale['items']] == ['A', 'B']
    assert sale['items'][1]['name'] == 'Produto B'


def test_stock_can_go_negative(container):
    product = add_product(container, 'A', 'Produto A', price=1, stock=1)
    session = container.session
    container.cart_service.add(session, product)
    container.cart_service.set_quantity(session, 0, 3)
    container.cart_service.set_payment_inputs(session, payment_method='pix')

    assert container.checkout_service.finalize(session)['ok']
    assert container.catalog_service.lookup_exact('A').stock == -2


def test_discount_above_subtotal_is_allowed(container):
    product = add_product(container, 'A', 'Produto A', price=10)
    session = container.session
    container.cart_service.add(session, product)
    container.cart_service.set_payment_inputs(session, discount=15, payment_method='cash', cash_received='')

    result = container.checkout_service.finalize(session)

    assert result['ok']
    assert result['sale'].total == -5


def test_finalize_plays_confirmation_tone(container):
    product = add_product(container, 'A', 'Produto A', price=10)
    session = container.session
    container.cart_service.add(session, product)
    container.feedback_service.drain()
    container.cart_service.set_payment_inputs(session, payment_method='pix')

    container.checkout_service.finalize(session)

    assert container.feedback_service.drain() == ['confirm']


def test_suspend_empty_cart_is_noop(container):
    result = container.checkout_service.suspend(container.session)
    assert result['code'] == 'empty_cart'
    assert container.suspended_repo.load() == []


def test_suspend_moves_cart_to_queue(container):
    product = add_product(container, 'A', 'Produto A', price=10)
    session = container.session
    container.cart_service.add(session, product)
    container.cart_service.add(session, product)
    container.cart_service.set_payment_inputs(session, discount=2, client_name='Joao')

    result = container.checkout_service.suspend(session)

    assert result['ok']
    queue = container.suspended_repo.load()
    assert len(queue) == 1
    assert queue[0]['client'] == 'Joao'
    assert [(i['barcode'], i['qty']) for i in queue[0]['items']] == [('A', 2)]
    assert 'discount' not in queue[0]
    assert session.lines == []
    assert session.discount == 0
    assert session.client_name == ''
    assert container.catalog_service.lookup_exact('A').stock == 5


def test_suspend_without_client_uses_unknown_label(container):
    product = add_product(container, 'A', 'Produto A')
    container.cart_service.add(container.session, product)

    container.checkout_service.suspend(container.session)

    assert container.suspended_repo.load()[0]['client'] == 'N/A'


def test_suspend_takes_client_name_argument(container):
    product = add_product(container, 'A', 'Produto A')
    container.cart_service.add(container.session, product)
    container.session.client_name = 'Ana'

    result = container.checkout_service.suspend(container.session, client_name='Maria')

    assert result['suspended'].client == 'Maria'
    assert container.session.client_name == ''


def test_suspend_empty_cart_ignores_client_name(container):
    session = container.session
    session.client_name = 'Ana'

    result = container.checkout_service.suspend(session, client_name='Maria')

    assert result['code'] == 'empty_cart'
    assert session.client_name == 'Ana'
    assert container.suspended_repo.load() == []


def test_cancel_clears_cart_and_inputs(container):
    product = add_product(container, 'A', 'Produto A')
    session = container.session
    container.cart_service.add(session, product)
    container.cart_service.set_payment_inputs(session, discount=1, client_name='Ana', cash_received='50')

    assert container.checkout_service.cancel(session)['ok']
    assert session.lines == []
    assert session.discount == 0
    assert session.client_name == ''
    assert session.cash_received == ''
    assert container.sales_repo.load() == []


def test_low_stock_alert_logged_after_sale(container, capsys):
    product = add_product(container, 'A', 'Garrafa', price=10, stock=6, min_stock=5)
    session = container.session
    container.cart_service.add(session, product)
    container.cart_service.set_payment_inputs(session, payment_method='pix')
    capsys.readouterr()

    container.checkout_service.finalize(session)

    out = capsys.readouterr().out
    assert '[ADVERTENCIA] Stock bajo: Garrafa (A)' in out


def test_low_stock_alert_respects_setting(container, capsys):
    container.settings_repo.update_fields({'enable_stock_alerts': False})
    product = add_product(container, 'A', 'Garrafa', price=10, stock=6, min_stock=5)
    session = container.session
    container.cart_service.add(session, product)
    container.cart_service.set_payment_inputs(session, payment_method='pix')
    capsys.readouterr()

    container.checkout_service.finalize(session)

    assert 'Stock bajo' not in capsys.readouterr().out
