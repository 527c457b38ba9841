from flask import Blueprint, jsonify

from delfos import bank

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Delfos Profiler API!'})

@main.route('/health')
def health():
    return jsonify({
        'status': 'ok',
        'questions': len(bank),
        'profiles': [p.name for p in bank.profiles()],
    })
