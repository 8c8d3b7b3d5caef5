from flask import Blueprint, request, jsonify, current_app, session
from flask_login import login_user, logout_user, login_required, current_user
from .models import LoginCode

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the liao scoreboard!'})

@main.route('/login', methods=['POST', 'OPTIONS'])
def login():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = request.get_json(silent=True) or {}
    code = data.get('code')
    length = int(current_app.config.get('LOGIN_CODE_LENGTH', 7))
    if not isinstance(code, str) or len(code) != length:
        return jsonify({"success": False, "message": f"Enter the {length}-character code."}), 400

    matched = next((lc for lc in LoginCode.query.all() if lc.check_code(code)), None)
    if matched is None:
        current_app.logger.info("[login] rejected code")
        return jsonify({"success": False, "message": "Invalid code"}), 401

    session.permanent = True
    login_user(matched, remember=True, duration=current_app.config.get('REMEMBER_COOKIE_DURATION'))
    current_app.logger.info(f"[login] session opened via code id={matched.id}")
    return jsonify({"success": True})

@main.route('/check_login', methods=['GET', 'OPTIONS'])
def check_login():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200

    @login_required
    def protected_check():
        return jsonify({"success": True, "login_id": current_user.id})

    return protected_check()

@main.route('/logout', methods=['POST', 'OPTIONS'])
@login_required
def logout():
    logout_user()
    return jsonify({"success": True})
