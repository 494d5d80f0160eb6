from flask import Blueprint, jsonify
from onenight.services.games.roles import catalog_in_wake_order

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the One Night game server!'})

@main.route('/health')
def health():
    return jsonify({'status': 'ok'})

@main.route('/roles')
def roles():
    """Role catalog, waking roles first in night order."""
    return jsonify([info.to_dict() for info in catalog_in_wake_order()])
