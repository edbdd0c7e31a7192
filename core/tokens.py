"""
JWT helpers for issuing tokens that carry the account role.
"""

from rest_framework_simplejwt.tokens import RefreshToken


class RoleRefreshToken(RefreshToken):
    """
    Refresh token whose payload (and derived access token) includes the
    user's marketplace role next to the ``userId`` claim.
    """

    @classmethod
    def for_user(cls, user):
        token = super().for_user(user)
        token['role'] = user.role
        return token


def issue_tokens(user):
    """
    Create a token pair for ``user``.

    Returns:
        dict: {'token': <access token>, 'refresh': <refresh token>}
    """
    refresh = RoleRefreshToken.for_user(user)
    return {
        'token': str(refresh.access_token),
        'refresh': str(refresh),
    }
