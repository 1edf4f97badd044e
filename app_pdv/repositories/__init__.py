# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso a la persistencia (archivos JSON).
# Cada repositorio es una de las cuatro claves del almacén:
#
# ESTRUCTURA:
# ├── interfaces.py            → Protocolos/Interfaces (contratos)
# ├── base.py                  → Clases base JSON (DictRepository, ListRepository)
# ├── product_repository.py    → Acceso a products.json
# ├── sales_repository.py      → Acceso a sales.json
# ├── suspended_repository.py  → Acceso a suspended.json
# └── settings_repository.py   → Acceso a settings.json
# ==============================================================================

# Interfaces
from .interfaces import (
    IRepository,
    IDictRepository,
    IListRepository,
    IProductRepository,
    ISalesRepository,
    ISuspendedRepository,
    ISettingsRepository,
)

# Implementaciones concretas (JSON)
from .base import BaseRepository, DictRepository, ListRepository
from .product_repository import ProductRepository
from .sales_repository import SalesRepository
from .suspended_repository import SuspendedRepository
from .settings_repository import SettingsRepository

__all__ = [
    # Interfaces
    'IRepository',
    'IDictRepository',
    'IListRepository',
    'IProductRepository',
    'ISalesRepository',
    'ISuspendedRepository',
    'ISettingsRepository',

    # Clases base
    'BaseRepository',
    'DictRepository',
    'ListRepository',

    # Implementaciones JSON
    'ProductRepository',
    'SalesRepository',
    'SuspendedRepository',
    'SettingsRepository',
]
