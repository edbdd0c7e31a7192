"""
Authentication backend that identifies accounts by email address.
"""

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

User = get_user_model()


class EmailBackend(ModelBackend):
    """
    Let users log in with their email address instead of a username.

    Serves the Django admin login form. The API login view looks the
    account up and checks the password itself.
    """

    def authenticate(self, request, username=None, password=None, **kwargs):
        """
        Authenticate a user by email (case-insensitive) and password.

        Returns:
            User object if authentication succeeds and the account is
            active, None otherwise
        """
        email = kwargs.get('email', username)

        if email is None or password is None:
            return None

        try:
            user = User.objects.get(email__iexact=email.strip())
        except User.DoesNotExist:
            # Run the default password hasher once to reduce the timing
            # difference between an existing and a nonexistent user
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user

        return None
