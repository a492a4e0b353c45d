from flask import Blueprint, jsonify

from models import db
from services import StatsAggregator

stats_bp = Blueprint("stats", __name__, url_prefix="/api")


@stats_bp.get("/stats")
def get_stats():
    return jsonify(StatsAggregator(db.session).snapshot()), 200
