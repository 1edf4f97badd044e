# ==============================================================================
# PUNTO DE ENTRADA WSGI
# ==============================================================================
# Producción:
#   gunicorn -w 1 -b 0.0.0.0:5000 wsgi:app
#
# Un solo worker: el estado de la caja (venta en curso) vive en memoria
# del proceso.
# ==============================================================================

from app_pdv.main import create_app

app = create_app()
