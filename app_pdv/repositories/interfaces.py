# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
#
# Contratos (protocolos) que cumplen los repositorios. Los servicios
# dependen de estas interfaces, no de los archivos JSON:
#
# 1. INDEPENDENCIA DE ALMACENAMIENTO
#    - Cambiar JSON por otra persistencia solo requiere nueva implementación
#
# 2. TESTING
#    - Fácil crear dobles en memoria que cumplan el contrato
#
# ==============================================================================

from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable

from app_pdv.models import AppSettings


# ==============================================================================
# INTERFACES BASE
# ==============================================================================

@runtime_checkable
class IRepository(Protocol):
    """
    Interfaz base para todos los repositorios.
    Cada repositorio es una clave del almacén durable.
    """

    key: str

    def reload(self) -> None:
        """Recarga datos desde el almacenamiento."""
        ...

    def get_snapshot(self) -> Any:
        """Copia completa de los datos."""
        ...

    def subscribe(self, callback: Callable[[str, Any], None]) -> Callable[[], None]:
        """Registra un callback que se llama después de cada escritura."""
        ...


@runtime_checkable
class IDictRepository(IRepository, Protocol):
    """
    Interfaz para repositorios basados en diccionarios.
    Usado por: Productos.
    """

    def get_all(self) -> Dict[str, Any]:
        ...

    def get_by_id(self, record_id: Any) -> Optional[Dict[str, Any]]:
        ...

    def save_all(self, data: Dict[str, Any]) -> bool:
        ...

    def update(self, record_id: Any, record_data: Dict[str, Any]) -> bool:
        ...

    def delete(self, record_id: Any) -> Optional[Dict[str, Any]]:
        ...


@runtime_checkable
class IListRepository(IRepository, Protocol):
    """
    Interfaz para repositorios basados en listas.
    Usado por: Ventas, Ventas suspendidas.
    """

    def get_all(self) -> List[Dict[str, Any]]:
        ...

    def save_all(self, data: List[Dict[str, Any]]) -> bool:
        ...

    def append(self, record: Dict[str, Any]) -> bool:
        ...


# ==============================================================================
# INTERFACES ESPECÍFICAS POR DOMINIO
# ==============================================================================

@runtime_checkable
class IProductRepository(Protocol):
    """Interfaz para el catálogo de productos (clave = código de barras)."""

    def load(self) -> Dict[str, Dict[str, Any]]:
        ...

    def save(self, products: Dict[str, Dict[str, Any]]) -> bool:
        ...

    def get_product(self, barcode: str) -> Optional[Dict[str, Any]]:
        ...

    def product_exists(self, barcode: str) -> bool:
        ...

    def upsert_product(self, barcode: str, data: Dict[str, Any]) -> bool:
        ...

    def delete_product(self, barcode: str) -> Optional[Dict[str, Any]]:
        ...


@runtime_checkable
class ISalesRepository(Protocol):
    """Interfaz para el historial de ventas (solo se agregan registros)."""

    def load(self) -> List[Dict[str, Any]]:
        ...

    def create_sale(self, sale_data: Dict[str, Any]) -> str:
        ...

    def get_by_id(self, sale_id: str) -> Optional[Dict[str, Any]]:
        ...

    def recent(self, limit: int) -> List[Dict[str, Any]]:
        ...


@runtime_checkable
class ISuspendedRepository(Protocol):
    """Interfaz para la cola de ventas suspendidas."""

    def load(self) -> List[Dict[str, Any]]:
        ...

    def add(self, suspended: Dict[str, Any]) -> bool:
        ...

    def get_by_id(self, suspended_id: str) -> Optional[Dict[str, Any]]:
        ...

    def remove(self, suspended_id: str) -> bool:
        ...


@runtime_checkable
class ISettingsRepository(Protocol):
    """Interfaz para la configuración de la tienda."""

    def load(self) -> AppSettings:
        ...

    def save(self, settings: AppSettings) -> bool:
        ...

    def update_fields(self, updates: Dict[str, Any]) -> AppSettings:
        ...
