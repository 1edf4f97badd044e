# ==============================================================================
# SERVICIO DE CATÁLOGO
# ==============================================================================
# Fuente única de verdad de los productos, identificados por código de
# barras. Reglas:
# - upsert reemplaza el registro completo (un código nuevo = otro producto)
# - eliminar un producto no toca el historial (las ventas guardan copia)
# - stock bajo: stock <= min_stock; el inventario lista primero los de
#   stock bajo y después por nombre
# ==============================================================================

import unicodedata
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from app_pdv.models import CartItem, Product
from app_pdv.performance_logger import log_event, profile_function
from app_pdv.repositories.interfaces import IProductRepository, ISettingsRepository

# Máximo de resultados de la búsqueda rápida
SEARCH_LIMIT = 5


def _name_sort_key(name: str) -> str:
    """Nombre sin acentos y en minúsculas, para ordenar alfabéticamente."""
    decomposed = unicodedata.normalize('NFKD', name or '')
    return ''.join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def inventory_sort_key(product: Product) -> Tuple[bool, str, str]:
    """Stock bajo primero; dentro de cada grupo, orden alfabético."""
    return (not product.is_low_stock, _name_sort_key(product.name), product.name)


class CatalogService:
    """
    Servicio para gestión del catálogo.

    Responsabilidades:
    - Crear, reemplazar y eliminar productos
    - Búsqueda por nombre o código y búsqueda exacta (escaneo)
    - Listado de inventario y alertas de stock bajo
    - Descontar stock al finalizar una venta
    """

    def __init__(self, product_repo: IProductRepository, settings_repo: ISettingsRepository):
        """
        Inicializa el servicio de catálogo.

        Args:
            product_repo: Repositorio de productos
            settings_repo: Repositorio de configuración (alertas de stock)
        """
        self.product_repo = product_repo
        self.settings_repo = settings_repo
        self._low_stock: Set[str] = {p.barcode for p in self.low_stock_products()}
        self.product_repo.subscribe(self._on_products_changed)

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def all_products(self) -> List[Product]:
        """Productos en el orden en que se guardaron."""
        return [Product.from_dict(p) for p in self.product_repo.load().values()]

    def lookup_exact(self, barcode: str) -> Optional[Product]:
        """
        Busca un producto por su código exacto (escaneo).

        Returns:
            Product o None si no existe
        """
        data = self.product_repo.get_product(str(barcode or '').strip())
        return Product.from_dict(data) if data else None

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> List[Product]:
        """
        Búsqueda rápida por nombre (sin distinguir mayúsculas) o por parte
        del código de barras.

        Args:
            query: Texto escrito o escaneado
            limit: Máximo de resultados

        Returns:
            Hasta `limit` productos, en orden del catálogo
        """
        term = (query or '').strip()
        if not term:
            return []
        lowered = term.lower()
        results = []
        for product in self.all_products():
            if lowered in product.name.lower() or lowered in product.barcode.lower():
                results.append(product)
                if len(results) >= limit:
                    break
        return results

    def list_inventory(self, term: str = '') -> List[Product]:
        """
        Listado de inventario: filtra por nombre, código o categoría y
        ordena con stock bajo primero, luego por nombre.
        """
        lowered = (term or '').strip().lower()
        products = self.all_products()
        if lowered:
            products = [
                p for p in products
                if lowered in p.name.lower()
                or lowered in p.barcode.lower()
                or lowered in p.category.lower()
            ]
        return sorted(products, key=inventory_sort_key)

    def low_stock_products(self) -> List[Product]:
        """Productos con stock en o por debajo del mínimo."""
        return sorted(
            (p for p in self.all_products() if p.is_low_stock),
            key=inventory_sort_key,
        )

    def resolve_submission(self, text: str) -> Dict[str, Any]:
        """
        Decide qué hacer con el texto enviado desde el campo de búsqueda.

        1. Código exacto → agregar ese producto
        2. Un único resultado de búsqueda → agregarlo
        3. Si no → ofrecer crear un producto con ese texto como código

        Returns:
            Dict con action ('add' o 'create') y product o barcode
        """
        text = (text or '').strip()
        if not text:
            return {'action': 'none'}

        product = self.lookup_exact(text)
        if product:
            return {'action': 'add', 'product': product}

        matches = self.search(text)
        if len(matches) == 1:
            return {'action': 'add', 'product': matches[0]}

        return {'action': 'create', 'barcode': text, 'matches': matches}

    # =========================================================================
    # ESCRITURAS
    # =========================================================================

    @profile_function(name='Guardar producto')
    def upsert(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Crea o reemplaza un producto.

        Args:
            data: Campos del producto (barcode obligatorio)

        Returns:
            Dict con ok, product o error
        """
        product = Product.from_dict(data or {})
        error = product.validate()
        if error:
            return {'ok': False, 'code': 'invalid_product', 'error': error}

        created = not self.product_repo.product_exists(product.barcode)
        self.product_repo.upsert_product(product.barcode, product.to_dict())
        log_event('INFO', f"Producto {'creado' if created else 'actualizado'}: {product.barcode} - {product.name}")
        return {'ok': True, 'product': product, 'created': created}

    @profile_function(name='Eliminar producto')
    def delete(self, barcode: str) -> Dict[str, Any]:
        """
        Elimina un producto. Las ventas pasadas conservan su copia.

        Returns:
            Dict con ok o error not_found
        """
        removed = self.product_repo.delete_product(str(barcode or '').strip())
        if removed is None:
            return {'ok': False, 'code': 'not_found', 'error': 'Producto no encontrado'}
        log_event('INFO', f"Producto eliminado: {barcode}")
        return {'ok': True, 'product': Product.from_dict(removed)}

    def plan_stock_decrements(self, items: Iterable[CartItem]) -> Tuple[Dict[str, Dict[str, Any]], List[str]]:
        """
        Calcula el catálogo resultante de descontar las líneas vendidas,
        sin guardar nada.

        Los productos que ya no existen se omiten. El stock puede quedar
        negativo.

        Returns:
            Tupla (catálogo_nuevo, códigos_omitidos)
        """
        catalog = self.product_repo.load()
        skipped = []
        for item in items:
            record = catalog.get(item.barcode)
            if record is None:
                skipped.append(item.barcode)
                continue
            record['stock'] = int(record.get('stock', 0)) - item.qty
        return catalog, skipped

    def commit_catalog(self, catalog: Dict[str, Dict[str, Any]]) -> bool:
        """Guarda el catálogo completo calculado por plan_stock_decrements()."""
        return self.product_repo.save(catalog)

    # =========================================================================
    # ALERTAS DE STOCK
    # =========================================================================

    def _on_products_changed(self, key: str, data: Dict[str, Dict[str, Any]]) -> None:
        """Avisa en el log de los productos que acaban de quedar en stock bajo."""
        current = set()
        names = {}
        for barcode, record in data.items():
            product = Product.from_dict(record)
            if product.is_low_stock:
                current.add(barcode)
                names[barcode] = (product.name, product.stock, product.min_stock)

        newly_low = current - self._low_stock
        self._low_stock = current

        if not newly_low or not self.settings_repo.load().enable_stock_alerts:
            return
        for barcode in sorted(newly_low):
            name, stock, min_stock = names[barcode]
            log_event('ADVERTENCIA', f"Stock bajo: {name} ({barcode}) quedan {stock}, mínimo {min_stock}")
