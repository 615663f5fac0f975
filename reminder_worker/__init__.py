from .alerts import Alert, build_alert
from .engine import EscalationEngine, TickResult, evaluate
from .models import AlertState, TaskSnapshot
