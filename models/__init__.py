from .db import db
from .audit_log import AuditLog
from .slot import Slot, SERVICE_KINDS
from .appointment import Appointment, APPOINTMENT_STATUSES
