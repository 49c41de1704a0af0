from django.conf import settings
from rest_framework import authentication, exceptions

from .models import UserStatus
from .services import get_active_session


class SessionCookieAuthentication(authentication.BaseAuthentication):
    """
    Authenticate requests from the HTTP-only session cookie.

    The session is loaded once per request; request.user is the principal
    for the rest of the request and request.auth is the Session row.
    """

    def authenticate(self, request):
        session_id = request.COOKIES.get(settings.AUTH_SESSION_COOKIE_NAME)
        if not session_id:
            return None

        session = get_active_session(session_id=session_id)
        if session is None:
            return None

        user = session.user
        if user.status != UserStatus.ACTIVE:
            raise exceptions.AuthenticationFailed('Account is not active')

        return (user, session)

    def authenticate_header(self, request):
        return 'Session'
