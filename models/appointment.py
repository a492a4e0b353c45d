from datetime import datetime
from models.db import db
from models.slot import _new_id

APPOINTMENT_STATUSES = ("confirmado", "cancelado", "pendente")


class Appointment(db.Model):
    __tablename__ = "appointments"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)

    slot_id = db.Column(db.String(36), db.ForeignKey("slots.id"), nullable=False, index=True)

    client_name = db.Column(db.String(120), nullable=False)
    client_email = db.Column(db.String(255), nullable=False, index=True)
    client_phone = db.Column(db.String(30), nullable=True)
    client_company = db.Column(db.String(160), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(20), nullable=False, default="confirmado")
    # status values: confirmado, cancelado, pendente

    confirmation_code = db.Column(db.String(16), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    slot = db.relationship("Slot", back_populates="appointment")

    __table_args__ = (
        # Hard business-rule: only one appointment can hold a slot (prevents double booking)
        db.UniqueConstraint("slot_id", name="uq_appointment_slot_once"),
        db.UniqueConstraint("confirmation_code", name="uq_appointment_confirmation_code"),
    )

    @property
    def scheduled_at(self):
        return self.slot.scheduled_at if self.slot else None

    @property
    def service(self):
        return self.slot.service if self.slot else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "slot_id": self.slot_id,
            "scheduled_at": self.scheduled_at.isoformat() if self.scheduled_at else None,
            "service": self.service,
            "client_name": self.client_name,
            "client_email": self.client_email,
            "client_phone": self.client_phone,
            "client_company": self.client_company,
            "notes": self.notes,
            "status": self.status,
            "confirmation_code": self.confirmation_code,
            "created_at": self.created_at.isoformat(),
        }
