from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from portal import db
from portal.auth import set_session_cookie
from portal.errors import NotFound
from portal.models import PlayerStats, Profile
from portal.services.verification.codes import issue_code
from portal.services.verification.sessions import redeem_code
from portal.services.identity.claims import claim_username


verification = Blueprint('verification', __name__)


@verification.route('/verification', methods=['POST'])
def request_verification_code():
    data = request.get_json(silent=True) or {}
    ttl = int(current_app.config.get('VERIFICATION_CODE_TTL_SEC', 0))
    code = issue_code(db.session, data.get('playerId'), ttl_seconds=ttl or None)
    return jsonify({'code': code})


@verification.route('/verify', methods=['POST'])
def verify_code():
    data = request.get_json(silent=True) or {}
    max_age = int(current_app.config.get('PLAYER_SESSION_MAX_AGE_SEC', 60 * 60 * 24 * 7))
    player_session = redeem_code(db.session, data.get('code'), max_age_seconds=max_age)
    response = jsonify({'success': True, 'player_id': player_session.player_id})
    return set_session_cookie(response, player_session)


@verification.route('/username', methods=['PUT'])
@login_required
def update_username():
    data = request.get_json(silent=True) or {}
    profile = claim_username(
        db.session,
        current_user.player_id,
        data.get('username'),
        current_app.extensions['identity_provider'],
        email_domain=current_app.config.get('IDENTITY_EMAIL_DOMAIN', 'game.local'),
    )
    return jsonify({'success': True, 'username': profile.username})


@verification.route('/profile', methods=['GET'])
@login_required
def get_profile():
    player_id = current_user.player_id
    stats = db.session.get(PlayerStats, player_id)
    if stats is None:
        raise NotFound('Player not found')
    profile = Profile.query.filter_by(player_id=player_id).first()
    payload = stats.to_dict()
    payload['username'] = profile.username if profile else None
    return jsonify(payload)
