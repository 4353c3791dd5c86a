import pytest
from django.core import mail
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User, UserRole


REGISTRATION_DATA = {
    'email': 'NewParent@Example.com',
    'password': 'SecurePass123',
    'password_confirm': 'SecurePass123',
    'first_name': 'Marta',
    'last_name': 'Wiśniewska',
    'phone': '+48 600 700 800',
}


# =============================================================================
# Registration Tests
# =============================================================================

@pytest.mark.django_db
class TestRegistration:
    """Tests for POST /api/auth/register/"""

    def test_register_success(self, api_client):
        """Successfully register a new parent."""
        url = reverse('users:register')
        response = api_client.post(url, REGISTRATION_DATA)

        assert response.status_code == status.HTTP_201_CREATED
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['user']['role'] == UserRole.PARENT

        user = User.objects.get(email='newparent@example.com')
        assert user.role == UserRole.PARENT
        assert user.phone == '+48 600 700 800'

    def test_register_sends_welcome_email(self, api_client, django_capture_on_commit_callbacks):
        """Welcome e-mail goes out after the account is committed."""
        url = reverse('users:register')
        with django_capture_on_commit_callbacks(execute=True):
            response = api_client.post(url, REGISTRATION_DATA)

        assert response.status_code == status.HTTP_201_CREATED
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ['newparent@example.com']
        assert 'Marta' in mail.outbox[0].alternatives[0][0]

    def test_register_duplicate_email(self, api_client, parent_user):
        """Cannot register with an existing email, whatever its case."""
        url = reverse('users:register')
        data = {**REGISTRATION_DATA, 'email': parent_user.email.upper()}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_register_password_mismatch(self, api_client):
        """Registration fails when passwords don't match."""
        url = reverse('users:register')
        data = {**REGISTRATION_DATA, 'password_confirm': 'Different123'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password_confirm' in response.data

    @pytest.mark.parametrize('password', ['Ab1', 'lowercase123', 'UPPERCASE123', 'NoDigitsHere'])
    def test_register_weak_password(self, api_client, password):
        """Password needs six characters with lower, upper and digit."""
        url = reverse('users:register')
        data = {**REGISTRATION_DATA, 'password': password, 'password_confirm': password}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password' in response.data

    def test_register_invalid_phone(self, api_client):
        """Phone must be a valid number."""
        url = reverse('users:register')
        data = {**REGISTRATION_DATA, 'phone': '12ab'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'phone' in response.data

    def test_register_short_name(self, api_client):
        """Names shorter than two letters are rejected."""
        url = reverse('users:register')
        data = {**REGISTRATION_DATA, 'first_name': 'M'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'first_name' in response.data


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, parent_user):
        """Login returns tokens and the user."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': 'Parent@Example.com', 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert response.data['user']['email'] == parent_user.email

        parent_user.refresh_from_db()
        assert parent_user.last_login is not None

    def test_login_wrong_password(self, api_client, parent_user):
        """Wrong password returns 401."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': parent_user.email, 'password': 'WrongPass123'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_unknown_email(self, api_client):
        """Unknown e-mail returns the same error."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': 'nobody@example.com', 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_account(self, api_client, parent_user):
        """Inactive accounts cannot log in."""
        parent_user.is_active = False
        parent_user.save()

        url = reverse('users:login')
        response = api_client.post(url, {'email': parent_user.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_logout(self, parent_client):
        """Logout succeeds for an authenticated user."""
        response = parent_client.post(reverse('users:logout'))

        assert response.status_code == status.HTTP_200_OK


# =============================================================================
# Profile Tests
# =============================================================================

@pytest.mark.django_db
class TestProfile:
    """Tests for /api/auth/user/"""

    def test_get_current_user(self, parent_client, parent_user):
        """Returns the logged in user."""
        response = parent_client.get(reverse('users:current-user'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == parent_user.email
        assert response.data['full_name'] == 'Jan Kowalski'

    def test_get_current_user_unauthenticated(self, api_client):
        """Requires authentication."""
        response = api_client.get(reverse('users:current-user'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_update_contract_data(self, parent_client, parent_user):
        """Parents fill in the data used on trip contracts."""
        response = parent_client.patch(reverse('users:update-profile'), {
            'address_street': 'ul. Długa 5',
            'address_zip': '30-001',
            'address_city': 'Kraków',
            'pesel': '80010112345',
        })

        assert response.status_code == status.HTTP_200_OK
        parent_user.refresh_from_db()
        assert parent_user.get_address() == 'ul. Długa 5, 30-001 Kraków'
        assert parent_user.pesel == '80010112345'

    def test_update_clears_optional_field(self, parent_client, parent_user):
        """Empty string clears an optional field."""
        response = parent_client.patch(reverse('users:update-profile'), {'phone': ''})

        assert response.status_code == status.HTTP_200_OK
        parent_user.refresh_from_db()
        assert parent_user.phone == ''

    @pytest.mark.parametrize('field,value', [
        ('address_zip', '30001'),
        ('pesel', '123'),
        ('phone', 'abc'),
    ])
    def test_update_invalid_values(self, parent_client, field, value):
        """Invalid profile values are rejected."""
        response = parent_client.patch(reverse('users:update-profile'), {field: value})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert field in response.data

    def test_role_is_read_only(self, parent_client, parent_user):
        """Role cannot be changed through the profile."""
        parent_client.patch(reverse('users:update-profile'), {'role': UserRole.ADMIN})

        parent_user.refresh_from_db()
        assert parent_user.role == UserRole.PARENT

    def test_change_password(self, parent_client, parent_user):
        """Change password with the current one."""
        response = parent_client.post(reverse('users:change-password'), {
            'current_password': 'TestPass123!',
            'new_password': 'BrandNew456',
        })

        assert response.status_code == status.HTTP_200_OK
        parent_user.refresh_from_db()
        assert parent_user.check_password('BrandNew456')

    def test_change_password_wrong_current(self, parent_client):
        """Wrong current password is rejected."""
        response = parent_client.post(reverse('users:change-password'), {
            'current_password': 'Wrong123',
            'new_password': 'BrandNew456',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Password Reset Tests
# =============================================================================

@pytest.mark.django_db
class TestPasswordReset:
    """Tests for the password reset flow."""

    def test_request_sends_email(self, api_client, parent_user, django_capture_on_commit_callbacks):
        """Reset request mails a link."""
        url = reverse('users:password-reset')
        with django_capture_on_commit_callbacks(execute=True):
            response = api_client.post(url, {'email': parent_user.email})

        assert response.status_code == status.HTTP_200_OK
        parent_user.refresh_from_db()
        assert parent_user.reset_token
        assert len(mail.outbox) == 1
        assert parent_user.reset_token in mail.outbox[0].alternatives[0][0]

    def test_request_unknown_email_does_not_leak(self, api_client):
        """Same answer whether or not the account exists."""
        url = reverse('users:password-reset')
        response = api_client.post(url, {'email': 'nobody@example.com'})

        assert response.status_code == status.HTTP_200_OK
        assert len(mail.outbox) == 0

    def test_confirm_sets_password_and_clears_token(self, api_client, parent_user):
        """Confirm sets the password and clears the token."""
        parent_user.reset_token = 'valid-reset-token-12345'
        parent_user.save()

        url = reverse('users:password-reset-confirm')
        response = api_client.post(url, {
            'token': 'valid-reset-token-12345',
            'new_password': 'FreshPass789',
            'new_password_confirm': 'FreshPass789',
        })

        assert response.status_code == status.HTTP_200_OK
        parent_user.refresh_from_db()
        assert parent_user.check_password('FreshPass789')
        assert parent_user.reset_token is None

    def test_confirm_invalid_token(self, api_client):
        """Unknown token is rejected."""
        url = reverse('users:password-reset-confirm')
        response = api_client.post(url, {
            'token': 'invalid-token',
            'new_password': 'FreshPass789',
            'new_password_confirm': 'FreshPass789',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Parent List Tests
# =============================================================================

@pytest.mark.django_db
class TestParentList:
    """Tests for GET /api/auth/parents/"""

    def test_admin_lists_parents_with_children_count(self, admin_client, participant, other_parent):
        """Admin sees parents with their children count."""
        response = admin_client.get(reverse('users:parent-list'))

        assert response.status_code == status.HTTP_200_OK
        counts = {row['email']: row['children_count'] for row in response.data}
        assert counts == {'parent@example.com': 1, 'other@example.com': 0}

    def test_parent_cannot_list_parents(self, parent_client):
        """Parent list is admin only."""
        response = parent_client.get(reverse('users:parent-list'))

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestHealthCheck:

    def test_health_is_public(self, api_client):
        """Health check needs no token."""
        response = api_client.get(reverse('health-check'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'status': 'ok'}

    def test_plain_http_is_served(self, api_client, settings):
        """The test client talks plain HTTP, so no HTTPS redirect is applied."""
        assert settings.SECURE_SSL_REDIRECT is False

        response = api_client.get(reverse('health-check'), secure=False)

        assert response.status_code == status.HTTP_200_OK
