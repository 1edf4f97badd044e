from app_pdv.models import Sale


def _sale(sale_id, date, total, method='cash', client='Cliente General', items=None, discount=0.0):
    items = items or [{'barcode': 'A', 'name': 'Uno', 'price': total + discount, 'cost': 0, 'qty': 1}]
    return Sale.from_dict({
        'id': sale_id,
        'date': date,
        'items': items,
        'discount': discount,
        'total': total,
        'payment_method': method,
        'client': client,
    }).to_dict()


def test_summary_without_sales(container):
    report = container.report_service.summary()

    assert report['total_revenue'] == 0
    assert report['sales_count'] == 0
    assert report['average_ticket'] == 0
    assert report['by_payment'] == {'cash': 0, 'credit': 0, 'debit': 0, 'pix': 0}


def test_summary_totals(container):
    repo = container.sales_repo
    repo.create_sale(_sale('1', '2024-05-01T10:00:00+00:00', 10, 'cash'))
    repo.create_sale(_sale('2', '2024-05-01T11:00:00+00:00', 30, 'pix'))
    repo.create_sale(_sale('3', '2024-05-02T09:00:00+00:00', 20, 'pix', items=[
        {'barcode': 'B', 'name': 'Dos', 'price': 12, 'cost': 5, 'qty': 2},
    ], discount=4))

    report = container.report_service.summary()

    assert report['total_revenue'] == 60
    assert report['sales_count'] == 3
    assert report['average_ticket'] == 20
    assert report['by_payment']['pix'] == 50
    assert report['by_payment']['cash'] == 10
    # 10 + 30 + (12 - 5) * 2 - 4
    assert report['gross_profit'] == 50


def test_history_filters_and_orders_newest_first(container):
    repo = container.sales_repo
    repo.create_sale(_sale('1001', '2024-05-01T10:00:00+00:00', 10, client='Ana Paula'))
    repo.create_sale(_sale('1002', '2024-05-02T10:00:00+00:00', 10))
    repo.create_sale(_sale('1003', '2024-05-02T18:00:00+00:00', 10, client='Paulo'))

    assert [s.id for s in container.report_service.history()] == ['1003', '1002', '1001']
    assert [s.id for s in container.report_service.history(term='paul')] == ['1003', '1001']
    assert [s.id for s in container.report_service.history(date='2024-05-02')] == ['1003', '1002']
    assert [s.id for s in container.report_service.history(term='1001', date='2024-05-02')] == []


def test_recent_for_insight_is_capped(container):
    repo = container.sales_repo
    for i in range(60):
        repo.create_sale(_sale(str(i), f'2024-05-01T10:{i:02d}:00+00:00', 5, items=[
            {'barcode': 'A', 'name': 'Uno', 'price': 2.5, 'qty': 2},
        ]))

    recent = container.report_service.recent_for_insight()

    assert len(recent) == 50
    assert recent[-1]['date'] == '2024-05-01T10:59:00+00:00'
    assert recent[0]['items'] == ['2x Uno']
    assert recent[0]['method'] == 'cash'
    assert container.report_service.recent_for_insight(limit=500) == recent


def test_get_sale(container):
    container.sales_repo.create_sale(_sale('77', '2024-05-01T10:00:00+00:00', 10))

    assert container.report_service.get_sale('77').total == 10
    assert container.report_service.get_sale('78') is None
