# ==============================================================================
# SERVICIO DE AVISOS SONOROS
# ==============================================================================
# La caja emite un tono corto (800 Hz) al agregar un producto y al cobrar.
# El servidor no reproduce audio: encola el evento y la ruta HTTP lo
# entrega en la respuesta ("feedback": ["confirm"]) para que el navegador
# lo toque. Solo se encola si la tienda tiene el sonido activado.
# ==============================================================================

from typing import List

from app_pdv.repositories.interfaces import ISettingsRepository

CONFIRM_TONE = 'confirm'


class FeedbackService:
    """Cola de eventos de sonido pendientes de entregar al navegador."""

    def __init__(self, settings_repo: ISettingsRepository):
        self.settings_repo = settings_repo
        self._events: List[str] = []

    def confirm(self) -> bool:
        """
        Encola el tono de confirmación.

        Returns:
            True si se encoló (sonido activado)
        """
        if not self.settings_repo.load().sound_enabled:
            return False
        self._events.append(CONFIRM_TONE)
        return True

    def pending(self) -> List[str]:
        """Eventos encolados, sin consumirlos."""
        return list(self._events)

    def drain(self) -> List[str]:
        """Entrega y vacía la cola de eventos."""
        events, self._events = self._events, []
        return events
