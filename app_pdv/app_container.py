# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Un contenedor por aplicación (create_app lo guarda en app.extensions).
# Crea repositorios y servicios a demanda y es dueño del estado de la caja
# (PosSession). Nada de esto es global: los tests crean su propio
# contenedor sobre un directorio temporal.
# ==============================================================================

import os
from typing import Any, Dict, Optional

from app_pdv import config
from app_pdv.models import INITIAL_PRODUCTS

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITORIOS - Capa de persistencia (JSON)
# ═══════════════════════════════════════════════════════════════════════════════
from app_pdv.repositories import (
    ProductRepository,
    SalesRepository,
    SuspendedRepository,
    SettingsRepository,
)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIOS - Capa de lógica de negocio
# ═══════════════════════════════════════════════════════════════════════════════
from app_pdv.services import (
    FeedbackService,
    CatalogService,
    CartService,
    PosSession,
    CheckoutService,
    SuspendedService,
    ReportService,
    ReceiptService,
    InsightService,
)


class AppContainer:
    """
    Contenedor de dependencias de la caja.

    Uso:
        container = AppContainer(config.as_dict())
        container.cart_service.add(container.session, product)
        container.checkout_service.finalize(container.session)
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        """
        Inicializa el contenedor.

        Args:
            settings: Configuración (claves de config.as_dict())
        """
        self.config = {**config.as_dict(), **(settings or {})}
        self.data_dir = self.config['DATA_DIR']
        os.makedirs(self.data_dir, exist_ok=True)

        # Estado de la caja (venta en curso)
        self.session = PosSession()

        # Repositorios (lazy loading)
        self._product_repo: Optional[ProductRepository] = None
        self._sales_repo: Optional[SalesRepository] = None
        self._suspended_repo: Optional[SuspendedRepository] = None
        self._settings_repo: Optional[SettingsRepository] = None

        # Servicios (lazy loading)
        self._feedback_service: Optional[FeedbackService] = None
        self._catalog_service: Optional[CatalogService] = None
        self._cart_service: Optional[CartService] = None
        self._checkout_service: Optional[CheckoutService] = None
        self._suspended_service: Optional[SuspendedService] = None
        self._report_service: Optional[ReportService] = None
        self._receipt_service: Optional[ReceiptService] = None
        self._insight_service: Optional[InsightService] = None

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def product_repo(self) -> ProductRepository:
        """Catálogo (con productos de demostración fuera de producción)."""
        if self._product_repo is None:
            seed = None if self.config['PRODUCTION_MODE'] else INITIAL_PRODUCTS
            self._product_repo = ProductRepository(self.data_dir, seed_products=seed)
        return self._product_repo

    @property
    def sales_repo(self) -> SalesRepository:
        if self._sales_repo is None:
            self._sales_repo = SalesRepository(self.data_dir)
        return self._sales_repo

    @property
    def suspended_repo(self) -> SuspendedRepository:
        if self._suspended_repo is None:
            self._suspended_repo = SuspendedRepository(self.data_dir)
        return self._suspended_repo

    @property
    def settings_repo(self) -> SettingsRepository:
        if self._settings_repo is None:
            self._settings_repo = SettingsRepository(self.data_dir)
        return self._settings_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def feedback_service(self) -> FeedbackService:
        if self._feedback_service is None:
            self._feedback_service = FeedbackService(self.settings_repo)
        return self._feedback_service

    @property
    def catalog_service(self) -> CatalogService:
        if self._catalog_service is None:
            self._catalog_service = CatalogService(self.product_repo, self.settings_repo)
        return self._catalog_service

    @property
    def cart_service(self) -> CartService:
        if self._cart_service is None:
            self._cart_service = CartService(self.catalog_service, self.feedback_service)
        return self._cart_service

    @property
    def checkout_service(self) -> CheckoutService:
        if self._checkout_service is None:
            self._checkout_service = CheckoutService(
                self.cart_service,
                self.catalog_service,
                self.sales_repo,
                self.suspended_repo,
                self.feedback_service
            )
        return self._checkout_service

    @property
    def suspended_service(self) -> SuspendedService:
        if self._suspended_service is None:
            self._suspended_service = SuspendedService(self.suspended_repo)
        return self._suspended_service

    @property
    def report_service(self) -> ReportService:
        if self._report_service is None:
            self._report_service = ReportService(self.sales_repo)
        return self._report_service

    @property
    def receipt_service(self) -> ReceiptService:
        if self._receipt_service is None:
            self._receipt_service = ReceiptService()
        return self._receipt_service

    @property
    def insight_service(self) -> InsightService:
        if self._insight_service is None:
            self._insight_service = InsightService(
                api_key=self.config['AI_API_KEY'],
                model=self.config['AI_MODEL'],
                base_url=self.config['AI_BASE_URL'],
                timeout=self.config['AI_TIMEOUT'],
                transport=self.config.get('AI_TRANSPORT'),
            )
        return self._insight_service

