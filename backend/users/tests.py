from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

User = get_user_model()

USERS_URL = reverse("users")
REGISTER_URL = reverse("register")
LOGIN_URL = reverse("login")
ME_URL = reverse("me")


def create_user(**params):
    return User.objects.create_user(**params)


class RegisterAndLoginTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.payload = {
            "email": "new@test.com",
            "password": "password123",
            "first_name": "New",
            "last_name": "Hooter",
        }

    def test_register_returns_profile_and_token(self):
        res = self.client.post(REGISTER_URL, self.payload, format="json")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["email"], "new@test.com")
        self.assertEqual(res.data["full_name"], "New Hooter")
        self.assertIn("token", res.data)
        self.assertNotIn("password", res.data)

        user = User.objects.get(email="new@test.com")
        self.assertTrue(user.check_password("password123"))
        self.assertFalse(user.is_staff)

    def test_register_cannot_make_itself_staff(self):
        payload = dict(self.payload, is_staff=True)
        self.client.post(REGISTER_URL, payload, format="json")

        self.assertFalse(User.objects.get(email="new@test.com").is_staff)

    def test_register_duplicate_email_is_bad_request(self):
        create_user(email="new@test.com", password="password123")

        res = self.client.post(REGISTER_URL, self.payload, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", res.data)

    def test_register_short_password_is_bad_request(self):
        payload = dict(self.payload, password="short")

        res = self.client.post(REGISTER_URL, payload, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", res.data)

    def test_login_returns_token_usable_for_hoots(self):
        create_user(email="login@test.com", password="password123")

        res = self.client.post(
            LOGIN_URL,
            {"email": "login@test.com", "password": "password123"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {res.data['access']}")
        self.assertEqual(
            self.client.get(reverse("hoot-list-create")).status_code,
            status.HTTP_200_OK,
        )

    def test_login_wrong_password_is_unauthorized(self):
        create_user(email="login@test.com", password="password123")

        res = self.client.post(
            LOGIN_URL, {"email": "login@test.com", "password": "nope"}, format="json"
        )

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)


class ProfileTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = create_user(
            email="me@test.com", password="password123", first_name="Me"
        )
        self.client.force_authenticate(user=self.user)

    def test_retrieve_own_profile(self):
        res = self.client.get(ME_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["id"], self.user.pk)
        self.assertEqual(res.data["email"], "me@test.com")

    def test_update_own_profile_hashes_password(self):
        res = self.client.patch(
            ME_URL, {"last_name": "Changed", "password": "newpassword123"}, format="json"
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.last_name, "Changed")
        self.assertTrue(self.user.check_password("newpassword123"))

    def test_profile_requires_authentication(self):
        self.client.force_authenticate(user=None)

        res = self.client.get(ME_URL)

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)


class UserListTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_superuser(
            email="admin@test.com", password="adminpassword"
        )
        self.regular_user = create_user(email="regular@test.com", password="pw123456")

    def test_admin_lists_users(self):
        self.client.force_authenticate(user=self.admin)

        res = self.client.get(USERS_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data), 2)

    def test_regular_user_forbidden(self):
        self.client.force_authenticate(user=self.regular_user)

        res = self.client.get(USERS_URL)

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
