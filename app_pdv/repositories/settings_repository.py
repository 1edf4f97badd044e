# ==============================================================================
# REPOSITORIO DE CONFIGURACIÓN DE LA TIENDA
# ==============================================================================
# Encapsula todo el acceso a settings.json
# Datos de la empresa (recibo) y opciones de la caja (sonido, alertas...)
# ==============================================================================

from typing import Any, Dict

from app_pdv.models import AppSettings
from app_pdv.repositories.base import BaseRepository

_CAMEL_TO_SNAKE = {
    'companyName': 'company_name',
    'receiptFooter': 'receipt_footer',
    'enableStockAlerts': 'enable_stock_alerts',
    'soundEnabled': 'sound_enabled',
    'lowSpecMode': 'low_spec_mode',
}


class SettingsRepository(BaseRepository):
    """
    Repositorio para la configuración de la tienda.

    Formato de datos en settings.json:
    {
        "company_name": "LS Utensílios e Variedades",
        "receipt_footer": "...",
        "sound_enabled": true,
        ...
    }
    """

    def __init__(self, base_path: str):
        super().__init__(base_path, 'settings')

    def _empty_data(self) -> Dict[str, Any]:
        return AppSettings().to_dict()

    def _normalize(self, raw_data: Dict[str, Any]) -> Dict[str, Any]:
        """Completa los campos que falten con los valores por defecto."""
        return AppSettings.from_dict(raw_data).to_dict()

    def load(self) -> AppSettings:
        """
        Carga la configuración.

        Returns:
            AppSettings completo
        """
        return AppSettings.from_dict(self._data)

    def save(self, settings: AppSettings) -> bool:
        """
        Guarda la configuración completa.

        Args:
            settings: Configuración a guardar
        """
        self._data = settings.to_dict()
        return self._commit()

    def update_fields(self, updates: Dict[str, Any]) -> AppSettings:
        """
        Actualiza solo los campos recibidos.

        Args:
            updates: Campos a cambiar (snake_case o camelCase)

        Returns:
            Configuración resultante
        """
        merged = dict(self._data)
        for key, value in (updates or {}).items():
            snake = _CAMEL_TO_SNAKE.get(key, key)
            if snake in merged and value is not None:
                merged[snake] = value
        settings = AppSettings.from_dict(merged)
        self.save(settings)
        return settings
