from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Ito game server!'})

@main.route('/health')
def health():
    coordinator = current_app.extensions['ito']
    return jsonify({'status': 'ok', 'rooms': len(coordinator.registry)})
