from .health import health_bp
from .slots import slots_bp
from .appointments import appointments_bp
from .stats import stats_bp
from .reports import reports_bp
from .audit_logs import audit_bp
