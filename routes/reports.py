import csv
from datetime import datetime
from io import StringIO

from flask import Blueprint, Response, jsonify, request

from models import db
from routes.appointments import parse_range
from services import AppointmentStore
from utils.dates import to_local

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")

CSV_HEADER = ["Data", "Hora", "Serviço", "Cliente", "Email", "Telefone", "Empresa", "Status", "Código", "Observações"]


def appointments_to_csv(appointments) -> str:
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADER)
    for a in appointments:
        local = to_local(a.scheduled_at)
        writer.writerow([
            local.strftime("%d/%m/%Y"),
            local.strftime("%H:%M"),
            a.service,
            a.client_name,
            a.client_email,
            a.client_phone or "",
            a.client_company or "",
            a.status,
            a.confirmation_code,
            a.notes or "",
        ])
    return output.getvalue()


# ---------- ADMIN: export appointments ----------
@reports_bp.get("/appointments.csv")
def export_appointments():
    try:
        date_range = parse_range(request.args)
    except ValueError:
        return jsonify(error="Invalid date range. Use ISO timestamps", code="validation_error"), 400

    store = AppointmentStore(db.session)
    rows = store.list_by_date_range(*date_range) if date_range else store.list_all()

    filename = f"agendamentos_{datetime.utcnow().strftime('%Y-%m-%d')}.csv"
    return Response(
        appointments_to_csv(rows),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
