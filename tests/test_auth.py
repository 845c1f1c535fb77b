import re

import pytest

from scisubmit.models.AuditLog import AuditLog
from scisubmit.models.enumerations import Role, UserStatus

from conftest import DEFAULT_PASSWORD

API = '/api/v1'


def _link_token(mail, path):
    match = re.search(rf'/{path}/(\S+)', mail['body'])
    assert match, mail['body']
    return match.group(1)


def _login(client, email, password=DEFAULT_PASSWORD):
    return client.post(f'{API}/auth/login', json={'email': email, 'password': password})


class TestRegistration:
    """Self registration and email verification."""

    payload = {
        'email': 'New.Author@Example.com',
        'password': 'Str0ngPass',
        'first_name': 'Nina',
        'last_name': 'Hruba',
        'university': 'UKF',
    }

    def test_register_verify_login(self, client, sent_mails):
        response = client.post(f'{API}/auth/register', json=self.payload)
        assert response.status_code == 201
        user = response.get_json()['user']
        assert user['email'] == 'new.author@example.com'
        assert user['role'] == 'participant'
        assert user['status'] == 'inactive'
        assert 'password_hash' not in user

        response = _login(client, 'new.author@example.com', 'Str0ngPass')
        assert response.status_code == 403
        assert response.get_json()['error'] == 'email_not_verified'

        token = _link_token(sent_mails[-1], 'verify-email')
        response = client.get(f'{API}/auth/verify-email/{token}')
        assert response.status_code == 200
        assert response.get_json()['user']['status'] == 'active'

        response = _login(client, 'new.author@example.com', 'Str0ngPass')
        assert response.status_code == 200
        body = response.get_json()
        assert body['access_token'] and body['refresh_token']
        assert body['user']['role'] == 'participant'

    def test_verification_token_is_single_use(self, client, sent_mails):
        client.post(f'{API}/auth/register', json=self.payload)
        token = _link_token(sent_mails[-1], 'verify-email')
        assert client.post(f'{API}/auth/verify-email', json={'token': token}).status_code == 200
        response = client.post(f'{API}/auth/verify-email', json={'token': token})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'validation_error'

    def test_verification_link_expires(self, client, sent_mails, clock):
        client.post(f'{API}/auth/register', json=self.payload)
        token = _link_token(sent_mails[-1], 'verify-email')
        clock.advance(hours=49)
        assert client.get(f'{API}/auth/verify-email/{token}').status_code == 400

    def test_reviewer_can_self_register(self, client, sent_mails):
        response = client.post(f'{API}/auth/register', json=dict(self.payload, role='reviewer'))
        assert response.status_code == 201
        assert response.get_json()['user']['role'] == 'reviewer'

    def test_admin_role_is_refused(self, client, sent_mails):
        response = client.post(f'{API}/auth/register', json=dict(self.payload, role='admin'))
        assert response.status_code == 403
        assert sent_mails == []

    def test_duplicate_email(self, client, participant, sent_mails):
        response = client.post(f'{API}/auth/register', json=dict(self.payload, email=participant.email.upper()))
        assert response.status_code == 409
        assert response.get_json()['error'] == 'conflict'

    def test_weak_password(self, client, sent_mails):
        response = client.post(f'{API}/auth/register', json=dict(self.payload, password='short'))
        assert response.status_code == 400
        assert 'password' in response.get_json()['details']

    def test_missing_fields(self, client):
        response = client.post(f'{API}/auth/register', json={'email': 'x@example.com'})
        assert response.status_code == 400
        body = response.get_json()
        assert body['error'] == 'validation_error'
        assert {'password', 'first_name', 'last_name'} <= set(body['details'])

    def test_failed_registration_is_audited(self, client, participant, sent_mails):
        client.post(f'{API}/auth/register', json=dict(self.payload, email=participant.email))
        assert AuditLog.query.filter_by(event='user.register.failed').count() == 1

    def test_resend_verification(self, client, sent_mails):
        client.post(f'{API}/auth/register', json=self.payload)
        first = _link_token(sent_mails[-1], 'verify-email')
        response = client.post(f'{API}/auth/resend-verification', json={'email': self.payload['email']})
        assert response.status_code == 200
        second = _link_token(sent_mails[-1], 'verify-email')
        assert first != second
        assert client.get(f'{API}/auth/verify-email/{first}').status_code == 400
        assert client.get(f'{API}/auth/verify-email/{second}').status_code == 200


class TestLogin:

    def test_wrong_password(self, client, participant):
        response = _login(client, participant.email, 'Wr0ngPassword')
        assert response.status_code == 401
        assert response.get_json()['error'] == 'authentication_failed'

    def test_unknown_email(self, client):
        assert _login(client, 'ghost@example.com').status_code == 401

    def test_suspended_account(self, client, create_user):
        user = create_user(status=UserStatus.SUSPENDED)
        response = _login(client, user.email)
        assert response.status_code == 403
        assert response.get_json()['error'] == 'account_not_active'

    def test_me(self, client, participant, auth_headers):
        response = client.get(f'{API}/auth/me', headers=auth_headers(participant))
        assert response.status_code == 200
        assert response.get_json()['email'] == participant.email

    def test_missing_token(self, client):
        response = client.get(f'{API}/auth/me')
        assert response.status_code == 401
        assert response.get_json()['error'] == 'auth_required'

    def test_garbage_token(self, client):
        response = client.get(f'{API}/auth/me', headers={'Authorization': 'Bearer not-a-jwt'})
        assert response.status_code == 401
        assert response.get_json()['error'] == 'invalid_token'

    def test_suspension_revokes_live_tokens(self, client, admin, participant, auth_headers):
        headers = auth_headers(participant)
        assert client.get(f'{API}/auth/me', headers=headers).status_code == 200

        client.put(f'{API}/admin/users/{participant.id}', json={'status': 'suspended'},
                   headers=auth_headers(admin))
        response = client.get(f'{API}/auth/me', headers=headers)
        assert response.status_code == 403
        assert response.get_json()['error'] == 'account_not_active'


class TestRefreshAndLogout:

    def test_refresh_then_logout(self, client, participant):
        tokens = _login(client, participant.email).get_json()
        refresh_headers = {'Authorization': f"Bearer {tokens['refresh_token']}"}

        response = client.post(f'{API}/auth/refresh', headers=refresh_headers)
        assert response.status_code == 200
        new_access = response.get_json()['access_token']
        assert client.get(f'{API}/auth/me', headers={'Authorization': f'Bearer {new_access}'}).status_code == 200

        response = client.post(f'{API}/auth/logout', headers={'Authorization': f"Bearer {tokens['access_token']}"})
        assert response.status_code == 200

        response = client.post(f'{API}/auth/refresh', headers=refresh_headers)
        assert response.status_code == 401

    def test_access_token_cannot_refresh(self, client, participant):
        tokens = _login(client, participant.email).get_json()
        response = client.post(f'{API}/auth/refresh', headers={'Authorization': f"Bearer {tokens['access_token']}"})
        assert response.status_code == 401


class TestPasswordReset:

    def test_unknown_email_is_silent(self, client, sent_mails):
        response = client.post(f'{API}/auth/forgot-password', json={'email': 'ghost@example.com'})
        assert response.status_code == 200
        assert sent_mails == []

    def test_reset_flow(self, client, participant, sent_mails):
        response = client.post(f'{API}/auth/forgot-password', json={'email': participant.email})
        assert response.status_code == 200
        token = _link_token(sent_mails[-1], 'reset-password')

        response = client.post(f'{API}/auth/reset-password', json={'token': token, 'password': 'N3wPassword'})
        assert response.status_code == 200
        assert _login(client, participant.email).status_code == 401
        assert _login(client, participant.email, 'N3wPassword').status_code == 200

        response = client.post(f'{API}/auth/reset-password', json={'token': token, 'password': 'An0therOne'})
        assert response.status_code == 400

    def test_reset_link_expires(self, client, participant, sent_mails, clock):
        client.post(f'{API}/auth/forgot-password', json={'email': participant.email})
        token = _link_token(sent_mails[-1], 'reset-password')
        clock.advance(minutes=61)
        response = client.post(f'{API}/auth/reset-password', json={'token': token, 'password': 'N3wPassword'})
        assert response.status_code == 400


class TestProfile:

    def test_update_profile_ignores_role(self, client, participant, auth_headers):
        response = client.put(f'{API}/user/profile', json={'university': 'STU', 'role': 'admin'},
                              headers=auth_headers(participant))
        assert response.status_code == 200
        body = response.get_json()
        assert body['university'] == 'STU'
        assert body['role'] == Role.PARTICIPANT.value

    def test_empty_name_rejected(self, client, participant, auth_headers):
        response = client.put(f'{API}/user/profile', json={'first_name': '   '}, headers=auth_headers(participant))
        assert response.status_code == 400

    @pytest.mark.parametrize('current, new, status', [
        (DEFAULT_PASSWORD, 'Chang3dPass', 200),
        ('Wr0ngCurrent', 'Chang3dPass', 401),
        (DEFAULT_PASSWORD, 'weak', 400),
    ])
    def test_change_password(self, client, participant, auth_headers, current, new, status):
        response = client.post(f'{API}/user/change-password',
                               json={'current_password': current, 'new_password': new},
                               headers=auth_headers(participant))
        assert response.status_code == status
