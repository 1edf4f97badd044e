# ==============================================================================
# REPOSITORIO BASE - Almacén clave-valor sobre archivos JSON
# ==============================================================================
# Cada clave (products, sales, suspended, settings) es un archivo JSON.
# - Se lee UNA vez al crear el repositorio y queda en memoria
# - Cada cambio se escribe completo (último en escribir gana)
# - Un error de disco se registra en el log y NO detiene la caja:
#   la memoria sigue siendo la fuente de verdad durante la sesión
# ==============================================================================

import copy
import json
import os
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from app_pdv.performance_logger import log_event

Subscriber = Callable[[str, Any], None]


class BaseRepository(ABC):
    """
    Una clave del almacén durable: un archivo JSON cacheado en memoria.
    Cada escritura reemplaza el archivo completo y avisa a los suscriptores.
    """

    # Lock global para evitar escrituras concurrentes a archivos
    _file_lock = threading.RLock()

    def __init__(self, base_path: str, key: str):
        """
        Inicializa el repositorio.

        Args:
            base_path: Directorio donde viven los JSON
            key: Nombre de la clave (y del archivo <key>.json)
        """
        self.key = key
        self.file_path = os.path.join(base_path, f'{key}.json')
        self._subscribers: List[Subscriber] = []
        self._data = self._normalize(self._read_raw())
        self._ensure_file_exists()

    def _ensure_file_exists(self) -> None:
        """Crea el archivo con los datos iniciales si no existe."""
        if not os.path.exists(self.file_path):
            self._write_raw(self._data)

    @abstractmethod
    def _empty_data(self) -> Any:
        """Valor usado cuando el archivo falta o no se puede leer."""

    def _is_valid(self, data: Any) -> bool:
        """Verifica que lo leído tenga el tipo esperado."""
        return isinstance(data, type(self._empty_data()))

    def _normalize(self, data: Any) -> Any:
        """
        Migra datos guardados con formatos viejos al formato actual.
        Las subclases la sobrescriben.
        """
        return data

    def _read_raw(self) -> Any:
        """
        Contenido del archivo, o _empty_data() si falta, está corrupto
        o tiene otro tipo.
        """
        with self._file_lock:
            if not os.path.exists(self.file_path):
                return self._empty_data()
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                log_event('ADVERTENCIA', f"{self.key}.json corrupto, usando valor por defecto ({e})")
                return self._empty_data()
            except OSError as e:
                log_event('ERROR', f"Leyendo {self.key}.json: {e}")
                return self._empty_data()

        if not self._is_valid(data):
            log_event('ADVERTENCIA', f"{self.key}.json con formato inesperado, usando valor por defecto")
            return self._empty_data()
        return data

    def _write_raw(self, data: Any) -> bool:
        """
        Reemplaza el archivo (temporal + os.replace).

        Returns:
            False si no se pudo escribir; el error queda en el log
        """
        with self._file_lock:
            # Escribir a archivo temporal primero para atomicidad
            temp_path = self.file_path + '.tmp'
            try:
                os.makedirs(os.path.dirname(self.file_path), exist_ok=True)
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, self.file_path)
                return True
            except (OSError, TypeError, ValueError) as e:
                log_event('ERROR', f"Guardando {self.key}.json: {e}")
                if os.path.exists(temp_path):
                    try:
                        os.remove(temp_path)
                    except OSError:
                        pass
                return False

    def _commit(self) -> bool:
        """Persiste el estado en memoria y avisa a los suscriptores."""
        ok = self._write_raw(self._data)
        for callback in list(self._subscribers):
            callback(self.key, self.get_snapshot())
        return ok

    def get_snapshot(self) -> Any:
        """Copia completa de los datos (los cambios no afectan al repositorio)."""
        return copy.deepcopy(self._data)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Registra una función que se llama después de cada escritura.

        Args:
            callback: Función (key, data)

        Returns:
            Función para cancelar la suscripción
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def reload(self) -> None:
        """Vuelve a leer el archivo (cambios hechos fuera de la caja)."""
        self._data = self._normalize(self._read_raw())


class DictRepository(BaseRepository):
    """
    Colección guardada como objeto JSON {id: registro}.

    products.json -> {"789...": {...}, "123...": {...}}
    """

    def _empty_data(self) -> Dict:
        return {}

    def get_all(self) -> Dict[str, Any]:
        """Copia de todos los registros."""
        return self.get_snapshot()

    def get_by_id(self, record_id: Any) -> Optional[Dict[str, Any]]:
        """Copia del registro, o None si la clave no existe."""
        record = self._data.get(str(record_id))
        return copy.deepcopy(record) if record is not None else None

    def save_all(self, data: Dict[str, Any]) -> bool:
        """Reemplaza la colección completa."""
        self._data = copy.deepcopy(data)
        return self._commit()

    def update(self, record_id: Any, record_data: Dict[str, Any]) -> bool:
        """Inserta el registro o lo reemplaza entero."""
        self._data[str(record_id)] = copy.deepcopy(record_data)
        return self._commit()

    def delete(self, record_id: Any) -> Optional[Dict[str, Any]]:
        """
        Quita el registro.

        Returns:
            El registro quitado, o None si no estaba
        """
        removed = self._data.pop(str(record_id), None)
        if removed is not None:
            self._commit()
        return removed


class ListRepository(BaseRepository):
    """
    Colección guardada como arreglo JSON, en orden de llegada.

    sales.json -> [{...}, {...}]
    """

    def _empty_data(self) -> List:
        return []

    def get_all(self) -> List[Dict[str, Any]]:
        """Copia de todos los registros, en orden de llegada."""
        return self.get_snapshot()

    def save_all(self, data: List[Dict[str, Any]]) -> bool:
        """Reemplaza la colección completa."""
        self._data = copy.deepcopy(data)
        return self._commit()

    def append(self, record: Dict[str, Any]) -> bool:
        """Agrega el registro al final."""
        self._data.append(copy.deepcopy(record))
        return self._commit()

    def find_by(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        """Copia del primer registro con record[field] == value, o None."""
        match = next((r for r in self._data if r.get(field) == value), None)
        return copy.deepcopy(match) if match is not None else None

    def remove_where(self, field: str, value: Any) -> int:
        """
        Quita todos los registros con record[field] == value.

        Returns:
            Cantidad de registros quitados
        """
        kept = [r for r in self._data if r.get(field) != value]
        removed = len(self._data) - len(kept)
        if removed:
            self._data = kept
            self._commit()
        return removed
