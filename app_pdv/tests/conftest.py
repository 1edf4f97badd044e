import os

import pytest

# Sin profiling durante los tests (los decoradores se aplican al importar)
os.environ.setdefault('PDV_ENABLE_PROFILING', '0')

from app_pdv import performance_logger
from app_pdv.app_container import AppContainer
from app_pdv.main import create_app


@pytest.fixture(autouse=True)
def logs_dir(tmp_path):
    """Cada test escribe sus logs en un directorio temporal."""
    path = tmp_path / 'logs'
    performance_logger.configure_logs_dir(str(path))
    return path


@pytest.fixture
def settings(tmp_path):
    return {
        'DATA_DIR': str(tmp_path / 'data'),
        'LOGS_DIR': str(tmp_path / 'logs'),
        'PRODUCTION_MODE': True,
        'ENABLE_PROFILING': False,
        'AI_API_KEY': '',
        'BACKUP_ON_STARTUP': False,
    }


@pytest.fixture
def container(settings):
    return AppContainer(settings)


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


def add_product(container, barcode, name, price=10.0, stock=5, min_stock=2, cost=0.0, category='diversos'):
    result = container.catalog_service.upsert({
        'barcode': barcode,
        'name': name,
        'price': price,
        'cost': cost,
        'stock': stock,
        'min_stock': min_stock,
        'category': category,
    })
    assert result['ok'], result
    return result['product']
