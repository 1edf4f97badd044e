# ==============================================================================
# SERVICIO DE BACKUPS AUTOMÁTICOS
# ==============================================================================
# Copia diaria de los cuatro archivos del almacén (productos, ventas,
# suspendidas, configuración) en un ZIP dentro de <datos>/backups/.
# Se conservan solo los últimos N backups.
#
# FORMATO: backup_YYYY-MM-DD.zip
# ==============================================================================

import os
import zipfile
from datetime import datetime
from typing import Any, Dict, List, Tuple

from app_pdv.performance_logger import log_event


class BackupService:
    """
    Servicio de backups diarios.

    Uso:
        backup_service = BackupService(data_dir, max_backups=7)
        backup_service.run_daily_backup()
    """

    DATA_FILES = [
        'products.json',
        'sales.json',
        'suspended.json',
        'settings.json',
    ]

    BACKUP_DIR_NAME = 'backups'

    def __init__(self, data_dir: str, max_backups: int = 7):
        """
        Args:
            data_dir: Directorio de los JSON
            max_backups: Cantidad de backups a conservar
        """
        self.data_dir = data_dir
        self.max_backups = max(1, max_backups)
        self.backup_root = os.path.join(data_dir, self.BACKUP_DIR_NAME)

    def _today_zip_path(self) -> str:
        today = datetime.now().strftime('%Y-%m-%d')
        return os.path.join(self.backup_root, f'backup_{today}.zip')

    def _backup_exists_today(self) -> bool:
        zip_path = self._today_zip_path()
        return os.path.exists(zip_path) and os.path.getsize(zip_path) > 0

    def existing_backups(self) -> List[str]:
        """
        Backups válidos (backup_YYYY-MM-DD.zip), el más reciente primero.
        """
        if not os.path.isdir(self.backup_root):
            return []

        backups = []
        for name in os.listdir(self.backup_root):
            if not (name.startswith('backup_') and name.endswith('.zip')):
                continue
            if not os.path.isfile(os.path.join(self.backup_root, name)):
                continue
            try:
                datetime.strptime(name[7:-4], '%Y-%m-%d')
            except ValueError:
                continue
            backups.append(name)

        backups.sort(reverse=True)
        return backups

    def _write_zip(self, zip_path: str) -> Tuple[int, List[str]]:
        """
        Crea el ZIP con los archivos de datos existentes.

        Returns:
            Tupla (archivos_agregados, errores)
        """
        added = 0
        errors = []
        try:
            with zipfile.ZipFile(zip_path, 'w', zipfile.ZIP_DEFLATED) as zf:
                for filename in self.DATA_FILES:
                    src = os.path.join(self.data_dir, filename)
                    if os.path.exists(src):
                        zf.write(src, filename)
                        added += 1
        except (OSError, zipfile.BadZipFile) as e:
            errors.append(f"Error creando ZIP: {e}")
            if os.path.exists(zip_path):
                try:
                    os.remove(zip_path)
                except OSError:
                    pass
            added = 0
        return added, errors

    def create_backup(self, force: bool = False) -> Dict[str, Any]:
        """
        Crea el backup del día.

        Args:
            force: Crear aunque ya exista uno hoy

        Returns:
            Dict con success, message, files_added, errors, backup_path
        """
        zip_path = self._today_zip_path()
        if not force and self._backup_exists_today():
            return {
                'success': True,
                'message': 'Backup del día ya existe',
                'files_added': 0,
                'errors': [],
                'backup_path': zip_path,
            }

        os.makedirs(self.backup_root, exist_ok=True)
        added, errors = self._write_zip(zip_path)
        if added:
            size_kb = round(os.path.getsize(zip_path) / 1024, 2)
            message = f'Backup creado: {added} archivos ({size_kb} KB)'
        else:
            message = 'No se encontraron archivos para respaldar'
            if os.path.exists(zip_path) and not errors:
                os.remove(zip_path)

        return {
            'success': added > 0,
            'message': message,
            'files_added': added,
            'errors': errors,
            'backup_path': zip_path if added else None,
        }

    def rotate_backups(self) -> Dict[str, int]:
        """Elimina los backups más viejos que excedan max_backups."""
        deleted = 0
        for name in self.existing_backups()[self.max_backups:]:
            try:
                os.remove(os.path.join(self.backup_root, name))
                deleted += 1
                log_event('INFO', f"Backup antiguo eliminado: {name}")
            except OSError as e:
                log_event('ERROR', f"No se pudo eliminar el backup {name}: {e}")
        return {'deleted_count': deleted, 'remaining_count': len(self.existing_backups())}

    def run_daily_backup(self) -> Dict[str, Any]:
        """Backup del día + rotación."""
        return {'backup': self.create_backup(), 'rotation': self.rotate_backups()}


def run_startup_backup(data_dir: str, max_backups: int = 7) -> None:
    """
    Ejecuta el backup al iniciar la aplicación.
    Ningún error de backup detiene el arranque.
    """
    try:
        result = BackupService(data_dir, max_backups).run_daily_backup()
    except OSError as e:
        log_event('ERROR', f"No se pudo ejecutar el backup: {e}")
        return

    backup = result['backup']
    if backup['errors']:
        log_event('ADVERTENCIA', f"Backup con errores: {backup['errors']}")
    else:
        log_event('INFO', backup['message'])
