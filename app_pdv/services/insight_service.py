# ==============================================================================
# SERVICIO DE ANÁLISIS CON IA
# ==============================================================================
# Envía un resumen de las últimas ventas (máximo 50) a un modelo Gemini
# (endpoint generateContent) y devuelve comentarios estratégicos en texto.
#
# - Corre en un hilo aparte: la caja nunca espera ni lee esta tarea
# - Una sola tarea a la vez; pedir otra cancela la anterior
# - Sin API key, error de red o respuesta inválida → estado 'error' con
#   un mensaje para mostrar en lugar del análisis
# ==============================================================================

import json
import threading
from typing import Any, Dict, List, Optional

import httpx

from app_pdv.performance_logger import log_event

# Estados de la tarea
PENDING = 'pending'
READY = 'ready'
ERROR = 'error'
CANCELLED = 'cancelled'

PROMPT_TEMPLATE = (
    "Eres consultor de una pequeña tienda de utensilios y variedades. "
    "Analiza estas ventas recientes y da 3 sugerencias estratégicas breves "
    "(productos que más salen, horarios, métodos de pago, combos):\n{sales}"
)


class InsightTask:
    """
    Una consulta en curso. El estado cambia una sola vez de 'pending'
    a 'ready', 'error' o 'cancelled'.
    """

    def __init__(self, task_id: int):
        self.id = task_id
        self.state = PENDING
        self.text = ''
        self.error = ''
        self._lock = threading.Lock()
        self._done = threading.Event()

    def finish(self, state: str, text: str = '', error: str = '') -> bool:
        with self._lock:
            if self.state != PENDING:
                return False
            self.state = state
            self.text = text
            self.error = error
        self._done.set()
        return True

    def cancel(self) -> bool:
        """Cancela la tarea si sigue pendiente."""
        return self.finish(CANCELLED)

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Espera a que termine (lo usan los tests y la ruta GET)."""
        return self._done.wait(timeout)

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'state': self.state, 'text': self.text, 'error': self.error}


class InsightService:
    """
    Cliente del análisis con IA.

    Uso:
        task = insight_service.start(report_service.recent_for_insight())
        ...
        insight_service.current().to_dict()
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Args:
            api_key: Clave de la API (vacía = análisis deshabilitado)
            model: Nombre del modelo
            base_url: URL base de la API
            timeout: Segundos máximos por consulta
            transport: Transporte httpx alternativo (tests)
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.transport = transport
        self._task: Optional[InsightTask] = None
        self._counter = 0
        self._lock = threading.Lock()

    def current(self) -> Optional[InsightTask]:
        """Última tarea lanzada (o None)."""
        return self._task

    def cancel(self) -> bool:
        """Cancela la tarea en curso, si hay una."""
        task = self._task
        return task.cancel() if task else False

    def start(self, sales_summary: List[Dict[str, Any]]) -> InsightTask:
        """
        Lanza una nueva consulta en segundo plano.

        Args:
            sales_summary: Ventas resumidas (ReportService.recent_for_insight)

        Returns:
            La tarea creada (estado 'pending' o ya 'error')
        """
        with self._lock:
            if self._task is not None:
                self._task.cancel()
            self._counter += 1
            task = InsightTask(self._counter)
            self._task = task

        if not self.api_key:
            task.finish(ERROR, error='Análisis con IA no disponible: falta la API key')
            return task
        if not sales_summary:
            task.finish(ERROR, error='No hay ventas para analizar')
            return task

        worker = threading.Thread(target=self._run, args=(task, sales_summary), daemon=True)
        worker.start()
        return task

    def _run(self, task: InsightTask, sales_summary: List[Dict[str, Any]]) -> None:
        try:
            text = self._request(sales_summary)
        except httpx.HTTPError as e:
            log_event('ERROR', f"Análisis IA: error de conexión ({e})")
            task.finish(ERROR, error='No se pudo conectar con el servicio de IA')
            return
        except (KeyError, IndexError, TypeError, ValueError) as e:
            log_event('ERROR', f"Análisis IA: respuesta inválida ({e})")
            task.finish(ERROR, error='Respuesta inválida del servicio de IA')
            return

        if not task.finish(READY, text=text):
            log_event('INFO', f"Análisis IA {task.id} descartado (cancelado)")

    def _request(self, sales_summary: List[Dict[str, Any]]) -> str:
        """Llama a generateContent y devuelve el texto de la primera respuesta."""
        url = f"{self.base_url}/models/{self.model}:generateContent"
        prompt = PROMPT_TEMPLATE.format(sales=json.dumps(sales_summary, ensure_ascii=False))
        payload = {'contents': [{'parts': [{'text': prompt}]}]}

        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            response = client.post(url, params={'key': self.api_key}, json=payload)
            response.raise_for_status()
            data = response.json()

        text = data['candidates'][0]['content']['parts'][0]['text']
        if not str(text).strip():
            raise ValueError('respuesta vacía')
        return str(text)
