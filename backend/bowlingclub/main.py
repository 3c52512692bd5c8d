from datetime import datetime, timezone

from flask import Blueprint, jsonify, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from bowlingclub import db

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the bowling club API!'})

@main.route('/health')
def health():
    try:
        db.session.execute(text('SELECT 1'))
        connected = True
    except SQLAlchemyError:
        current_app.logger.exception('[health] database check failed')
        db.session.rollback()
        connected = False
    return jsonify({
        'status': 'OK' if connected else 'DEGRADED',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'database': {
            'connected': connected,
            'status': 'healthy' if connected else 'unhealthy',
        },
    }), 200 if connected else 503
