import uuid
from datetime import datetime
from models.db import db

# Carregamento = loading, Descarregamento = unloading
SERVICE_KINDS = ("Carregamento", "Descarregamento")


def _new_id() -> str:
    return str(uuid.uuid4())


class Slot(db.Model):
    __tablename__ = "slots"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)

    # naive UTC
    scheduled_at = db.Column(db.DateTime, nullable=False, index=True)
    service = db.Column(db.String(20), nullable=False)

    is_available = db.Column(db.Boolean, default=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    appointment = db.relationship("Appointment", back_populates="slot", uselist=False)

    __table_args__ = (
        db.Index("ix_slots_time_service", "scheduled_at", "service"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "scheduled_at": self.scheduled_at.isoformat(),
            "service": self.service,
            "available": self.is_available,
            "created_at": self.created_at.isoformat(),
        }
