"""
Flask web server for WordSmith Collocate.

Routes
──────
GET  /                             Single-page UI
GET  /api/state                    Full page state (JSON)
POST /api/collocations             Look up collocations for {"word": ...}
GET  /api/history                  Recent search words (JSON)
POST /api/history/select           Make {"word": ...} the current word
GET  /api/notifications            Active notifications (JSON)
POST /api/notifications/dismiss    Dismiss {"id": ...}, or all when omitted
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv
from flask import Blueprint, Flask, current_app, jsonify, render_template, request

# Allow running as `python web/app.py` from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

load_dotenv()

from config.settings import Settings
from core.collocations import CollocationAnalyzer
from core.history import SearchHistoryStore
from core.lookup import Analyzer, LookupSession, SearchOutcome
from core.notifications import NotificationQueue, Scheduler

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

_OUTCOME_STATUS: dict[SearchOutcome, int] = {
    SearchOutcome.FOUND: 200,
    SearchOutcome.EMPTY: 200,
    SearchOutcome.INVALID: 400,
    SearchOutcome.BUSY: 409,
    SearchOutcome.FAILED: 502,
}


def create_app(
    settings: Optional[Settings] = None,
    analyzer: Optional[Analyzer] = None,
    scheduler: Optional[Scheduler] = None,
) -> Flask:
    """Build the Flask app and the lookup session it serves.

    Args:
        settings: Configuration; read from the environment when omitted.
        analyzer: Collocation lookup; defaults to the Claude-backed analyzer.
        scheduler: Timer factory for notification removal.
    """
    settings = settings or Settings()

    session = LookupSession(
        analyzer=analyzer or CollocationAnalyzer(settings),
        history_store=SearchHistoryStore(settings.db_path),
        notifications=NotificationQueue(
            capacity=settings.notification_limit,
            remove_delay=settings.notification_remove_delay,
            scheduler=scheduler,
        ),
        history_limit=settings.history_limit,
    )

    app = Flask(__name__)
    app.extensions["lookup_session"] = session
    app.register_blueprint(_routes())
    return app


def _session() -> LookupSession:
    return current_app.extensions["lookup_session"]


def _routes():
    bp = Blueprint("wordsmith", __name__)

    # ── UI ─────────────────────────────────────────────────────────────────

    @bp.route("/")
    def index():
        return render_template("index.html")

    @bp.route("/api/state")
    def state():
        return jsonify(_session().snapshot())

    # ── Lookup ─────────────────────────────────────────────────────────────

    @bp.route("/api/collocations", methods=["POST"])
    def lookup():
        """Run a collocation search and return the resulting page state."""
        body = request.get_json(silent=True) or {}
        word = body.get("word", "")
        if not isinstance(word, str):
            return jsonify({"error": "word must be a string"}), 400

        session = _session()
        outcome = session.search(word)
        return jsonify({"outcome": outcome.value, **session.snapshot()}), _OUTCOME_STATUS[outcome]

    # ── History ────────────────────────────────────────────────────────────

    @bp.route("/api/history")
    def list_history():
        return jsonify(_session().history)

    @bp.route("/api/history/select", methods=["POST"])
    def select_history():
        body = request.get_json(silent=True) or {}
        word = body.get("word")
        if not isinstance(word, str):
            return jsonify({"error": "word is required"}), 400
        session = _session()
        session.select_history(word)
        return jsonify({"word": session.word})

    # ── Notifications ──────────────────────────────────────────────────────

    @bp.route("/api/notifications")
    def list_notifications():
        return jsonify(
            [n.model_dump(mode="json") for n in _session().notifications.notifications]
        )

    @bp.route("/api/notifications/dismiss", methods=["POST"])
    def dismiss_notification():
        """Dismiss one notification by id, or all of them."""
        body = request.get_json(silent=True) or {}
        notification_id = body.get("id")
        queue = _session().notifications
        if notification_id is not None and queue.get(str(notification_id)) is None:
            return jsonify({"error": "Not found"}), 404
        queue.dismiss(None if notification_id is None else str(notification_id))
        return jsonify([n.model_dump(mode="json") for n in queue.notifications])

    return bp


# ── Entry point ────────────────────────────────────────────────────────────

if __name__ == "__main__":
    settings = Settings()
    settings.validate()
    app = create_app(settings)
    atexit.register(app.extensions["lookup_session"].close)
    app.run(debug=settings.debug, host="0.0.0.0", port=settings.port)
