# ==============================================================================
# CONFIGURACIÓN DEL PDV
# ==============================================================================
# Constantes del sistema. Cada una puede sobrescribirse con una variable
# de entorno, así el mismo código corre en la caja de la tienda, en
# desarrollo y en los tests (que apuntan todo a un directorio temporal).
# ==============================================================================

import os

BASE = os.path.dirname(os.path.abspath(__file__))


def _env_flag(name: str, default: bool) -> bool:
    """Lee una variable de entorno booleana ('1', 'true', 'si'...)."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'si', 'sí', 'on')


# ═══════════════════════════════════════════════════════════════════════════════
# DATOS Y LOGS
# ═══════════════════════════════════════════════════════════════════════════════
# products.json, sales.json, suspended.json y settings.json viven en DATA_DIR
DATA_DIR = os.environ.get('PDV_DATA_DIR', os.path.join(BASE, 'data'))
LOGS_DIR = os.environ.get('PDV_LOGS_DIR', os.path.join(BASE, 'logs'))

# ═══════════════════════════════════════════════════════════════════════════════
# MODO PRODUCCIÓN
# ═══════════════════════════════════════════════════════════════════════════════
# True = Catálogo vacío, los productos se cargan desde la caja
# False = Se siembra el catálogo de demostración de la tienda
PRODUCTION_MODE = _env_flag('PDV_PRODUCTION_MODE', True)

# Profiling de rutas y funciones (logs en LOGS_DIR)
ENABLE_PROFILING = _env_flag('PDV_ENABLE_PROFILING', True)

# ═══════════════════════════════════════════════════════════════════════════════
# ANÁLISIS CON IA
# ═══════════════════════════════════════════════════════════════════════════════
AI_API_KEY = os.environ.get('PDV_AI_API_KEY') or os.environ.get('GEMINI_API_KEY', '')
AI_MODEL = os.environ.get('PDV_AI_MODEL', 'gemini-2.0-flash')
AI_BASE_URL = os.environ.get(
    'PDV_AI_BASE_URL', 'https://generativelanguage.googleapis.com/v1beta'
)
AI_TIMEOUT = float(os.environ.get('PDV_AI_TIMEOUT', 30))
AI_MAX_SALES = 50

# ═══════════════════════════════════════════════════════════════════════════════
# BACKUPS
# ═══════════════════════════════════════════════════════════════════════════════
BACKUP_ON_STARTUP = _env_flag('PDV_BACKUP_ON_STARTUP', True)
MAX_BACKUPS = int(os.environ.get('PDV_MAX_BACKUPS', 7))

# ═══════════════════════════════════════════════════════════════════════════════
# SERVIDOR DE DESARROLLO
# ═══════════════════════════════════════════════════════════════════════════════
DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
PORT = int(os.environ.get('FLASK_PORT', 5000))


def as_dict() -> dict:
    """Configuración por defecto, en el formato que espera create_app()."""
    return {
        'DATA_DIR': DATA_DIR,
        'LOGS_DIR': LOGS_DIR,
        'PRODUCTION_MODE': PRODUCTION_MODE,
        'ENABLE_PROFILING': ENABLE_PROFILING,
        'AI_API_KEY': AI_API_KEY,
        'AI_MODEL': AI_MODEL,
        'AI_BASE_URL': AI_BASE_URL,
        'AI_TIMEOUT': AI_TIMEOUT,
        'AI_MAX_SALES': AI_MAX_SALES,
        'BACKUP_ON_STARTUP': BACKUP_ON_STARTUP,
        'MAX_BACKUPS': MAX_BACKUPS,
    }
