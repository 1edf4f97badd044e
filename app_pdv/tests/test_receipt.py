from app_pdv.models import AppSettings, CartItem, Sale
from app_pdv.services import ReceiptService
from app_pdv.services.receipt_service import format_money


def _sale(**overrides):
    data = dict(
        id='1718900123456',
        date='2024-06-20T14:13:20+00:00',
        items=[CartItem('7891000100015', 'Garrafa Térmica', 49.9, qty=2)],
        subtotal=99.8,
        discount=0.0,
        total=99.8,
        payment_method='pix',
        client='Cliente General',
    )
    data.update(overrides)
    return Sale(**data)


def test_receipt_contents():
    html = ReceiptService().render_html(_sale(), AppSettings())

    assert 'LS Utensílios e Variedades' in html
    assert 'CNPJ: 00.000.000/0001-00' in html
    assert 'Pedido #123456' in html
    assert '2 x Garrafa Térmica' in html
    assert '...0015' in html
    assert 'R$ 99,80' in html
    assert 'Pix' in html
    assert 'Obrigado pela preferência!' in html
    assert '*** NÃO É DOCUMENTO FISCAL ***' in html


def test_receipt_discount_and_client_are_optional():
    plain = ReceiptService().render_html(_sale(), AppSettings())
    assert 'Desconto' not in plain
    assert 'Cliente' not in plain

    html = ReceiptService().render_html(
        _sale(discount=9.8, total=90.0, client='Maria'),
        AppSettings(receipt_footer='Volte sempre', cnpj=''),
    )
    assert 'Desconto' in html
    assert 'R$ 9,80' in html
    assert 'Maria' in html
    assert 'Volte sempre' in html
    assert 'CNPJ' not in html


def test_receipt_escapes_names():
    sale = _sale(items=[CartItem('1', '<b>Pote</b>', 1.0, qty=1)], client='<script>')
    html = ReceiptService().render_html(sale, AppSettings())

    assert '<b>Pote</b>' not in html
    assert '&lt;script&gt;' in html


def test_format_money():
    assert format_money(1234.5) == 'R$ 1.234,50'
    assert format_money(0) == 'R$ 0,00'
