# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Esta capa contiene TODA la lógica de negocio de la caja.
#
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Aplican reglas de negocio y validaciones
# 3. Las rutas (controllers) solo llaman a servicios
# 4. Las validaciones devuelven {'ok': False, 'code': ..., 'error': ...}
#    y no cambian ningún estado
#
# ESTRUCTURA:
# ├── catalog_service.py   → Productos, búsqueda, inventario, alertas de stock
# ├── cart_service.py      → Carrito y datos de pago (PosSession)
# ├── checkout_service.py  → Finalizar, suspender, cancelar
# ├── suspended_service.py → Restaurar/eliminar ventas suspendidas
# ├── report_service.py    → Reportes e historial
# ├── receipt_service.py   → Recibo imprimible
# ├── insight_service.py   → Análisis con IA en segundo plano
# ├── feedback_service.py  → Avisos sonoros
# └── backup_service.py    → Backups diarios
# ==============================================================================

from app_pdv.services.feedback_service import FeedbackService
from app_pdv.services.catalog_service import CatalogService
from app_pdv.services.cart_service import CartService, PosSession, parse_amount
from app_pdv.services.checkout_service import CheckoutService
from app_pdv.services.suspended_service import SuspendedService
from app_pdv.services.report_service import ReportService
from app_pdv.services.receipt_service import ReceiptService
from app_pdv.services.insight_service import InsightService, InsightTask
from app_pdv.services.backup_service import BackupService, run_startup_backup

__all__ = [
    'FeedbackService',
    'CatalogService',
    'CartService',
    'PosSession',
    'parse_amount',
    'CheckoutService',
    'SuspendedService',
    'ReportService',
    'ReceiptService',
    'InsightService',
    'InsightTask',
    'BackupService',
    'run_startup_backup',
]
