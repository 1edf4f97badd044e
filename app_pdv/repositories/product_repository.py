# ==============================================================================
# REPOSITORIO DE PRODUCTOS (catálogo)
# ==============================================================================
# Encapsula todo el acceso a products.json
# El catálogo se almacena como diccionario: {barcode: {datos_producto}}
# ==============================================================================

from typing import Any, Dict, Iterable, Optional

from app_pdv.models import Product
from app_pdv.repositories.base import DictRepository


class ProductRepository(DictRepository):
    """
    Repositorio para el catálogo de productos.

    Formato de datos en products.json:
    {
        "7891000100015": {
            "barcode": "7891000100015",
            "name": "Garrafa Térmica Inox 1L",
            "price": 49.9,
            "cost": 25.0,
            "stock": 20,
            "min_stock": 5,
            "category": "cozinha"
        },
        ...
    }

    Nota: Registros viejos con "minStock" se migran al cargar.
    """

    def __init__(self, base_path: str, seed_products: Optional[Iterable[Product]] = None):
        """
        Inicializa el repositorio de productos.

        Args:
            base_path: Directorio de datos
            seed_products: Catálogo inicial cuando products.json no existe
                           o está corrupto (None = catálogo vacío)
        """
        self._seed = {p.barcode: p.to_dict() for p in (seed_products or [])}
        super().__init__(base_path, 'products')

    def _empty_data(self) -> Dict[str, Any]:
        return dict(self._seed)

    def _normalize(self, raw_data: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        """
        Normaliza el catálogo: cada registro con el formato actual y la
        clave igual a su código de barras.
        """
        normalized = {}
        for key, value in raw_data.items():
            if not isinstance(value, dict):
                continue
            value = dict(value)
            value.setdefault('barcode', key)
            product = Product.from_dict(value)
            normalized[product.barcode or str(key)] = product.to_dict()
        return normalized

    def load(self) -> Dict[str, Dict[str, Any]]:
        """
        Carga el catálogo completo.

        Returns:
            Diccionario de productos {barcode: datos}
        """
        return self.get_all()

    def save(self, products: Dict[str, Dict[str, Any]]) -> bool:
        """
        Guarda el catálogo completo.

        Args:
            products: Diccionario de productos
        """
        return self.save_all(products)

    def get_product(self, barcode: str) -> Optional[Dict[str, Any]]:
        """
        Obtiene un producto por su código de barras.

        Args:
            barcode: Código de barras

        Returns:
            Datos del producto o None si no existe
        """
        return self.get_by_id(barcode)

    def product_exists(self, barcode: str) -> bool:
        """Verifica si un producto existe."""
        return str(barcode) in self._data

    def upsert_product(self, barcode: str, data: Dict[str, Any]) -> bool:
        """
        Crea o reemplaza completo el producto.

        Args:
            barcode: Código de barras
            data: Datos del producto
        """
        return self.update(barcode, data)

    def delete_product(self, barcode: str) -> Optional[Dict[str, Any]]:
        """
        Elimina un producto.

        Returns:
            Datos del producto eliminado o None
        """
        return self.delete(barcode)
