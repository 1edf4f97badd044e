# -*- coding: utf-8 -*-
"""
Test del sistema de backups (formato ZIP)
"""
import os
import zipfile
from datetime import datetime

from app_pdv.services import BackupService, run_startup_backup


def _touch(path, content='[]'):
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content)


def test_backup_zip_contains_data_files(tmp_path):
    for name in ('products.json', 'sales.json', 'suspended.json', 'settings.json', 'otro.json'):
        _touch(str(tmp_path / name))

    result = BackupService(str(tmp_path)).create_backup()

    assert result['success']
    assert result['files_added'] == 4
    with zipfile.ZipFile(result['backup_path']) as zf:
        assert sorted(zf.namelist()) == ['products.json', 'sales.json', 'settings.json', 'suspended.json']
    today = datetime.now().strftime('%Y-%m-%d')
    assert os.path.basename(result['backup_path']) == f'backup_{today}.zip'


def test_backup_only_once_per_day(tmp_path):
    _touch(str(tmp_path / 'sales.json'))
    service = BackupService(str(tmp_path))

    service.create_backup()
    second = service.create_backup()

    assert second['success']
    assert second['message'] == 'Backup del día ya existe'


def test_no_data_files(tmp_path):
    result = BackupService(str(tmp_path)).create_backup()

    assert result['success'] is False
    assert result['backup_path'] is None
    assert BackupService(str(tmp_path)).existing_backups() == []


def test_rotation_keeps_newest(tmp_path):
    service = BackupService(str(tmp_path), max_backups=2)
    os.makedirs(service.backup_root)
    for day in ('2024-01-01', '2024-01-02', '2024-01-03'):
        _touch(os.path.join(service.backup_root, f'backup_{day}.zip'), 'x')
    _touch(os.path.join(service.backup_root, 'backup_invalido.zip'), 'x')

    result = service.rotate_backups()

    assert result == {'deleted_count': 1, 'remaining_count': 2}
    assert service.existing_backups() == ['backup_2024-01-03.zip', 'backup_2024-01-02.zip']
    assert os.path.exists(os.path.join(service.backup_root, 'backup_invalido.zip'))


def test_startup_backup_logs_result(tmp_path, capsys):
    _touch(str(tmp_path / 'products.json'), '{}')

    run_startup_backup(str(tmp_path))

    assert '[INFO] Backup creado: 1 archivos' in capsys.readouterr().out
