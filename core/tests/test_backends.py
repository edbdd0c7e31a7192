from django.contrib.auth import authenticate, get_user_model
from django.test import TestCase

User = get_user_model()


class EmailBackendTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email='backend@test.com',
            password='SecurePass123!',
            name='Backend User'
        )

    def test_authenticate_by_email(self):
        self.assertEqual(
            authenticate(username='backend@test.com', password='SecurePass123!'),
            self.user
        )

    def test_email_lookup_is_case_insensitive(self):
        self.assertEqual(
            authenticate(email='BACKEND@test.com', password='SecurePass123!'),
            self.user
        )

    def test_wrong_password(self):
        self.assertIsNone(authenticate(username='backend@test.com', password='nope'))

    def test_unknown_email(self):
        self.assertIsNone(authenticate(username='ghost@test.com', password='SecurePass123!'))

    def test_inactive_user_cannot_authenticate(self):
        self.user.is_active = False
        self.user.save()

        self.assertIsNone(authenticate(username='backend@test.com', password='SecurePass123!'))

    def test_username_mirrors_email(self):
        self.assertEqual(self.user.username, 'backend@test.com')

    def test_admin_login_form_accepts_email(self):
        self.user.is_staff = True
        self.user.save()

        response = self.client.post('/admin/login/', {
            'username': 'BACKEND@test.com',
            'password': 'SecurePass123!',
            'next': '/admin/',
        })

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.url, '/admin/')
        self.assertEqual(int(self.client.session['_auth_user_id']), self.user.pk)
