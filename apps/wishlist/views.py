from django.conf import settings
from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.utils import get_client_ip, get_user_agent
from apps.notifications.exceptions import NotificationError
from .permissions import IsWishlistAdmin
from .serializers import (
    WishlistItemInputSerializer,
    ConfirmationInputSerializer,
    ContributionInputSerializer,
    AccessCodeRequestSerializer,
    VerifyCodeSerializer,
    WishlistItemSerializer,
    AdminWishlistItemSerializer,
    WishlistConfirmationSerializer,
    WishlistContributionSerializer,
)
from .services import (
    list_items,
    get_item,
    get_active_item,
    create_item,
    update_item,
    delete_item,
    list_contributions,
    confirm_item,
    contribute_to_item,
    issue_access_code,
    verify_access_code,
    # Exceptions
    WishlistServiceError,
    WishlistItemNotFoundError,
    RateLimitExceededError,
    AccessCodeError,
    EmailNotAllowedError,
    AccessCodeExpiredError,
    InvalidAccessCodeError,
    TooManyCodeAttemptsError,
)


# Response serializers for API documentation
class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


def _error_response(error):
    """Map a service exception to an error response."""
    if isinstance(error, WishlistItemNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, (RateLimitExceededError, TooManyCodeAttemptsError)):
        code = status.HTTP_429_TOO_MANY_REQUESTS
    elif isinstance(error, EmailNotAllowedError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(error, InvalidAccessCodeError):
        code = status.HTTP_401_UNAUTHORIZED
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(error)}, status=code)


def _set_cookie(response, name, value, max_age):
    response.set_cookie(
        name,
        value,
        max_age=max_age,
        httponly=True,
        secure=settings.AUTH_SESSION_COOKIE_SECURE,
        samesite='Lax',
        path='/',
    )


# =============================================================================
# Admin
# =============================================================================

@extend_schema(
    request=WishlistItemInputSerializer,
    responses={200: AdminWishlistItemSerializer(many=True), 201: AdminWishlistItemSerializer},
    description="GET lists every item with progress and donor counts; POST creates an item.",
    tags=['wishlist'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsWishlistAdmin])
def admin_item_list(request):
    if request.method == 'GET':
        items = list_items()
        return Response({'items': AdminWishlistItemSerializer(items, many=True).data})

    serializer = WishlistItemInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    item = create_item(**serializer.validated_data)
    return Response({'item': AdminWishlistItemSerializer(item).data}, status=status.HTTP_201_CREATED)


@extend_schema(
    request=WishlistItemInputSerializer,
    responses={200: AdminWishlistItemSerializer, 404: ErrorResponseSerializer},
    description="PUT applies a partial update; DELETE removes the item with its pledges.",
    tags=['wishlist'],
)
@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsWishlistAdmin])
def admin_item_detail(request, item_id):
    if request.method == 'DELETE':
        try:
            delete_item(item_id=item_id)
        except WishlistServiceError as e:
            return _error_response(e)
        return Response({'message': 'Item deleted successfully'})

    serializer = WishlistItemInputSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    try:
        item = update_item(item_id=item_id, **serializer.validated_data)
    except WishlistServiceError as e:
        return _error_response(e)

    return Response({'item': AdminWishlistItemSerializer(item).data})


@extend_schema(
    responses={200: WishlistContributionSerializer(many=True), 404: ErrorResponseSerializer},
    description="Monetary pledges for one item, newest first.",
    tags=['wishlist'],
)
@api_view(['GET'])
@permission_classes([IsWishlistAdmin])
def admin_item_contributions(request, item_id):
    try:
        contributions = list_contributions(item_id=item_id)
        item = get_item(item_id)
    except WishlistServiceError as e:
        return _error_response(e)

    return Response({
        'item': {'id': item.id, 'title': item.title},
        'contributions': WishlistContributionSerializer(contributions, many=True).data,
    })


@extend_schema(
    request=AccessCodeRequestSerializer,
    responses={200: MessageResponseSerializer, 403: ErrorResponseSerializer},
    description="Email a one-time access code to an allow-listed address.",
    tags=['wishlist'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def access_code(request):
    serializer = AccessCodeRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        token = issue_access_code(email=serializer.validated_data['email'])
    except AccessCodeError as e:
        return _error_response(e)
    except NotificationError:
        return Response({'error': 'Failed to send code'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    response = Response({'message': 'Code sent'})
    _set_cookie(
        response,
        settings.WISHLIST_CODE_COOKIE_NAME,
        token,
        settings.WISHLIST_CODE_TTL_MINUTES * 60,
    )
    return response


@extend_schema(
    request=VerifyCodeSerializer,
    responses={
        200: MessageResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Exchange the emailed code for a temporary access cookie.",
    tags=['wishlist'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def verify_code(request):
    serializer = VerifyCodeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        token = verify_access_code(
            email=serializer.validated_data['email'],
            code=serializer.validated_data['code'],
            code_token=request.COOKIES.get(settings.WISHLIST_CODE_COOKIE_NAME),
        )
    except AccessCodeError as e:
        response = _error_response(e)
        if isinstance(e, (AccessCodeExpiredError, TooManyCodeAttemptsError)):
            response.delete_cookie(settings.WISHLIST_CODE_COOKIE_NAME, path='/', samesite='Lax')
        return response

    response = Response({'message': 'Access granted'})
    _set_cookie(
        response,
        settings.WISHLIST_ACCESS_COOKIE_NAME,
        token,
        settings.WISHLIST_ACCESS_TTL_HOURS * 60 * 60,
    )
    response.delete_cookie(settings.WISHLIST_CODE_COOKIE_NAME, path='/', samesite='Lax')
    return response


# =============================================================================
# Public
# =============================================================================

@extend_schema(
    responses={200: WishlistItemSerializer, 404: ErrorResponseSerializer},
    description="An active item with its progress.",
    tags=['wishlist'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def public_item(request, item_id):
    try:
        item = get_active_item(item_id)
    except WishlistServiceError as e:
        return _error_response(e)

    return Response({'item': WishlistItemSerializer(item).data})


@extend_schema(
    request=ConfirmationInputSerializer,
    responses={201: WishlistConfirmationSerializer, 400: ErrorResponseSerializer, 429: ErrorResponseSerializer},
    description="Pledge to buy some quantity of an item.",
    tags=['wishlist'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def public_confirm(request, item_id):
    serializer = ConfirmationInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        confirmation = confirm_item(
            item_id=item_id,
            ip_address=get_client_ip(request),
            user_agent=get_user_agent(request),
            **serializer.validated_data
        )
    except WishlistServiceError as e:
        return _error_response(e)

    return Response({
        'message': 'Thank you for your generous donation! Your confirmation has been recorded.',
        'confirmation': WishlistConfirmationSerializer(confirmation).data,
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    request=ContributionInputSerializer,
    responses={201: WishlistContributionSerializer, 400: ErrorResponseSerializer, 429: ErrorResponseSerializer},
    description="Pledge money toward an item's remaining value.",
    tags=['wishlist'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def public_contribute(request, item_id):
    serializer = ContributionInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        contribution = contribute_to_item(
            item_id=item_id,
            ip_address=get_client_ip(request),
            user_agent=get_user_agent(request),
            **serializer.validated_data
        )
    except WishlistServiceError as e:
        return _error_response(e)

    return Response({
        'message': 'Thank you! Your contribution has been recorded.',
        'contribution': WishlistContributionSerializer(contribution).data,
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    responses={410: ErrorResponseSerializer},
    description="Retired endpoint.",
    tags=['wishlist'],
)
@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([AllowAny])
def gone(request, item_id=None):
    return Response(
        {'error': 'This endpoint is no longer available'},
        status=status.HTTP_410_GONE
    )
