from django.conf import settings
from django.utils import timezone
from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .permissions import Capability, IsActiveUser, require_capability
from .serializers import (
    UserSerializer,
    UserRegistrationSerializer,
    UserLoginSerializer,
    SetPasswordSerializer,
    PasswordResetRequestSerializer,
    PasswordResetConfirmSerializer,
    ProfileUpdateSerializer,
    UserIdSerializer,
    UpdateUserRoleSerializer,
    UpdateUserStatusSerializer,
)
from .services import (
    register_user,
    authenticate_user,
    create_session,
    delete_session,
    verify_user_email,
    set_initial_password,
    request_password_reset,
    reset_password,
    list_users,
    approve_user,
    deny_user,
    suspend_user,
    update_user_role,
    update_user_status,
    update_profile,
    # Exceptions
    UserRegistrationError,
    RegistrationEmailError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidTokenError,
    UserNotFoundError,
    EmailNotVerifiedError,
    PasswordAlreadySetError,
    InvalidUserStateError,
)
from .utils import get_client_ip, get_user_agent


# Response serializers for API documentation
class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()


CanManageUsers = require_capability(Capability.MANAGE_USERS, 'Insufficient permissions to manage users')


def _set_session_cookie(response, session):
    response.set_cookie(
        settings.AUTH_SESSION_COOKIE_NAME,
        session.id,
        max_age=settings.AUTH_SESSION_TTL_HOURS * 3600,
        httponly=True,
        secure=settings.AUTH_SESSION_COOKIE_SECURE,
        samesite='Lax',
        path='/',
    )


# =============================================================================
# Authentication
# =============================================================================

@extend_schema(
    request=UserRegistrationSerializer,
    responses={
        201: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        500: ErrorResponseSerializer,
    },
    description="Register an account. A verification link is emailed; an administrator must approve the account.",
    tags=['auth'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def register(request):
    """Register a new user account."""
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = register_user(**serializer.validated_data)
    except UserRegistrationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except RegistrationEmailError as e:
        return Response({'error': str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response({
        'message': 'Registration successful. Please check your email to verify your account.',
        'user': UserSerializer(user).data,
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=[OpenApiParameter('token', str, required=True)],
    responses={200: MessageResponseSerializer, 400: ErrorResponseSerializer},
    description="Verify an email address with the token from the verification link.",
    tags=['auth'],
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def verify_email(request):
    """Verify email with token."""
    try:
        user = verify_user_email(token=request.query_params.get('token', ''))
    except InvalidTokenError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    body = {
        'message': 'Email verified successfully. Your account is pending administrator approval.',
        'email': user.email,
    }
    if not user.has_password:
        body['redirect_to'] = f'/set-password?email={user.email}'
    return Response(body)


@extend_schema(
    request=SetPasswordSerializer,
    responses={200: MessageResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Set the first password of a verified account.",
    tags=['auth'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def set_password(request):
    serializer = SetPasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        set_initial_password(**serializer.validated_data)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except (EmailNotVerifiedError, PasswordAlreadySetError) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'message': 'Password set successfully. You can log in once your account is approved.'})


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
    },
    description="Authenticate with email and password; sets the HTTP-only session cookie.",
    tags=['auth'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login(request):
    """Login with email and password."""
    serializer = UserLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = authenticate_user(**serializer.validated_data)
    except (InvalidCredentialsError, InactiveAccountError) as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    session = create_session(
        user=user,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )

    response = Response({
        'message': 'Login successful',
        'user': UserSerializer(user).data,
    })
    _set_session_cookie(response, session)
    return response


@extend_schema(
    request=None,
    responses={200: MessageResponseSerializer},
    description="End the current session and clear the session cookie.",
    tags=['auth'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def logout(request):
    """Logout and delete the session."""
    session_id = request.COOKIES.get(settings.AUTH_SESSION_COOKIE_NAME)
    if session_id:
        delete_session(session_id=session_id)

    response = Response({'message': 'Logout successful'})
    response.delete_cookie(settings.AUTH_SESSION_COOKIE_NAME, path='/', samesite='Lax')
    return response


@extend_schema(
    request=PasswordResetRequestSerializer,
    responses={200: MessageResponseSerializer},
    description="Request a password reset email. Always returns success for security.",
    tags=['auth'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def forgot_password(request):
    """Request password reset email."""
    serializer = PasswordResetRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    request_password_reset(email=serializer.validated_data['email'])

    return Response({
        'message': 'If an account with that email exists, a password reset link has been sent.'
    })


@extend_schema(
    request=PasswordResetConfirmSerializer,
    responses={200: MessageResponseSerializer, 400: ErrorResponseSerializer},
    description="Reset the password with a single-use token.",
    tags=['auth'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def confirm_password_reset(request):
    """Confirm password reset with token."""
    serializer = PasswordResetConfirmSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        reset_password(
            token=serializer.validated_data['token'],
            new_password=serializer.validated_data['password'],
        )
    except InvalidTokenError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'message': 'Password reset successfully. You can now log in with your new password.'
    })


# =============================================================================
# Profile
# =============================================================================

@extend_schema(
    responses={200: UserSerializer},
    description="Get the current authenticated user's profile.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsActiveUser])
def get_current_user(request):
    """Get current authenticated user profile."""
    return Response(UserSerializer(request.user).data)


@extend_schema(
    request=ProfileUpdateSerializer,
    responses={200: AuthResponseSerializer, 400: ErrorResponseSerializer},
    description="Update the current user's Zelle details.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsActiveUser])
def update_profile_view(request):
    """Update user profile."""
    serializer = ProfileUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = update_profile(user=request.user, zelle=serializer.validated_data.get('zelle'))

    return Response({
        'message': 'Profile updated successfully',
        'user': UserSerializer(user).data,
    })


# =============================================================================
# User administration
# =============================================================================

@extend_schema(
    parameters=[OpenApiParameter('status', str, required=False)],
    responses={200: UserSerializer(many=True)},
    description="List users, newest first.",
    tags=['users'],
)
@api_view(['GET'])
@permission_classes([CanManageUsers])
def user_list(request):
    users = list_users(status=request.query_params.get('status'))
    return Response({'users': UserSerializer(users, many=True).data})


@extend_schema(
    request=UserIdSerializer,
    responses={200: MessageResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Approve a pending user or reactivate a suspended one.",
    tags=['users'],
)
@api_view(['POST'])
@permission_classes([CanManageUsers])
def approve_user_view(request):
    serializer = UserIdSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        _, action = approve_user(user_id=serializer.validated_data['user_id'], approved_by=request.user)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except InvalidUserStateError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'message': f'User {action} successfully'})


@extend_schema(
    request=UserIdSerializer,
    responses={200: MessageResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Deny a pending registration. The account is deleted.",
    tags=['users'],
)
@api_view(['POST'])
@permission_classes([CanManageUsers])
def deny_user_view(request):
    serializer = UserIdSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        deny_user(user_id=serializer.validated_data['user_id'], denied_by=request.user)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except InvalidUserStateError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'message': 'User registration denied successfully'})


@extend_schema(
    request=UserIdSerializer,
    responses={200: MessageResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Suspend a user.",
    tags=['users'],
)
@api_view(['POST'])
@permission_classes([CanManageUsers])
def suspend_user_view(request):
    serializer = UserIdSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        suspend_user(user_id=serializer.validated_data['user_id'], suspended_by=request.user)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except InvalidUserStateError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'message': 'User suspended successfully'})


@extend_schema(
    request=UpdateUserRoleSerializer,
    responses={200: MessageResponseSerializer, 404: ErrorResponseSerializer},
    description="Change a user's role. Setting the current role is a no-op.",
    tags=['users'],
)
@api_view(['POST'])
@permission_classes([CanManageUsers])
def update_user_role_view(request):
    serializer = UpdateUserRoleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        _, changed = update_user_role(**serializer.validated_data)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    if not changed:
        return Response({'message': 'Role already set'})
    return Response({'message': 'User role updated successfully'})


@extend_schema(
    request=UpdateUserStatusSerializer,
    responses={200: MessageResponseSerializer, 404: ErrorResponseSerializer},
    description="Change a user's status. Setting the current status is a no-op.",
    tags=['users'],
)
@api_view(['POST'])
@permission_classes([CanManageUsers])
def update_user_status_view(request):
    serializer = UpdateUserStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        _, changed = update_user_status(**serializer.validated_data)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    if not changed:
        return Response({'message': 'Status already set'})
    return Response({'message': 'User status updated successfully'})
