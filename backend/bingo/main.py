from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Airline Bingo server!'})

@main.route('/api/health')
def health():
    actions = current_app.extensions['bingo_actions']
    return jsonify({
        'success': True,
        'dataService': actions.service.name,
        'rooms': len(actions.registry.room_codes()),
    })
