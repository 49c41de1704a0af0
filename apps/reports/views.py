from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import Capability, IsActiveUser, require_capability
from apps.expenses.services import ExpenseNotFoundError
from .serializers import (
    ReportCreateSerializer,
    ReportUpdateSerializer,
    ReportIdSerializer,
    ApproveReportSerializer,
    ReportCommentSerializer,
    AddReportNoteSerializer,
    ReportFilterSerializer,
    ExpenseReportSerializer,
    ReportNoteSerializer,
)
from .services import (
    get_report,
    list_reports,
    add_report_note,
    list_report_notes,
    create_report,
    update_report,
    approve_report,
    deny_report,
    request_report_change,
    close_report,
    # Exceptions
    ReportsServiceError,
    ReportNotFoundError,
    ReportPermissionError,
    MissingAttachmentsError,
)


# Response serializers for API documentation
class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class ReportResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    report = ExpenseReportSerializer()


CanApproveReports = require_capability(
    Capability.APPROVE_EXPENSES, 'Insufficient permissions to approve reports'
)
CanManageReports = require_capability(
    Capability.MANAGE_REPORTS, 'Only admins can manage expense reports'
)
CanCloseReports = require_capability(
    Capability.MARK_AS_PAID, 'Insufficient permissions to close reports'
)


class ReportPagination(PageNumberPagination):
    """Page/limit pagination for report lists."""
    page_size = 20
    page_size_query_param = 'limit'
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response({
            'reports': data,
            'pagination': {
                'page': self.page.number,
                'limit': self.get_page_size(self.request),
                'total': self.page.paginator.count,
                'pages': self.page.paginator.num_pages,
            },
        })


def _error_response(error):
    """Map a service exception to an error response."""
    if isinstance(error, (ReportNotFoundError, ExpenseNotFoundError)):
        return Response({'error': str(error)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(error, ReportPermissionError):
        return Response({'error': str(error)}, status=status.HTTP_403_FORBIDDEN)
    body = {'error': str(error)}
    if isinstance(error, MissingAttachmentsError) and error.required is not None:
        body['required_attachments'] = error.required
        body['provided_attachments'] = error.provided
    return Response(body, status=status.HTTP_400_BAD_REQUEST)


def _report_response(message, report, code=status.HTTP_200_OK):
    return Response({
        'message': message,
        'report': ExpenseReportSerializer(get_report(report.id)).data,
    }, status=code)


@extend_schema(
    parameters=[ReportFilterSerializer],
    responses={200: ExpenseReportSerializer(many=True)},
    description="List all expense reports, newest first. Paginated with page/limit.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([CanManageReports])
def report_list(request):
    filters = ReportFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)

    reports = list_reports(**filters.validated_data)

    paginator = ReportPagination()
    page = paginator.paginate_queryset(reports, request)
    return paginator.get_paginated_response(ExpenseReportSerializer(page, many=True).data)


@extend_schema(
    request=ReportCreateSerializer,
    responses={201: ReportResponseSerializer, 400: ErrorResponseSerializer, 403: ErrorResponseSerializer},
    description="File a report for a paid expense. One receipt is required per approved item.",
    tags=['reports'],
)
@api_view(['POST'])
@permission_classes([IsActiveUser])
def report_create(request):
    serializer = ReportCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        report = create_report(user=request.user, **serializer.validated_data)
    except (ReportsServiceError, ExpenseNotFoundError) as e:
        return _error_response(e)

    return _report_response('Report created successfully', report, status.HTTP_201_CREATED)


@extend_schema(
    request=ReportUpdateSerializer,
    responses={200: ReportResponseSerializer, 400: ErrorResponseSerializer, 403: ErrorResponseSerializer},
    description="Edit a report sent back for changes and resubmit it.",
    tags=['reports'],
)
@api_view(['PUT', 'POST'])
@permission_classes([IsActiveUser])
def report_update(request):
    serializer = ReportUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        report = update_report(user=request.user, **serializer.validated_data)
    except ReportsServiceError as e:
        return _error_response(e)

    return _report_response('Report updated and resubmitted successfully', report)


@extend_schema(
    request=ApproveReportSerializer,
    responses={200: ReportResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Approve a pending report.",
    tags=['reports'],
)
@api_view(['POST'])
@permission_classes([CanApproveReports])
def report_approve(request):
    serializer = ApproveReportSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        report = approve_report(approver=request.user, **serializer.validated_data)
    except ReportsServiceError as e:
        return _error_response(e)

    return _report_response('Report approved successfully', report)


@extend_schema(
    request=ReportCommentSerializer,
    responses={200: ReportResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Deny a pending report. A comment is required.",
    tags=['reports'],
)
@api_view(['POST'])
@permission_classes([CanApproveReports])
def report_deny(request):
    serializer = ReportCommentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        report = deny_report(approver=request.user, **serializer.validated_data)
    except ReportsServiceError as e:
        return _error_response(e)

    return _report_response('Report denied successfully', report)


@extend_schema(
    request=ReportCommentSerializer,
    responses={200: ReportResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Send a pending or approved report back to its requester.",
    tags=['reports'],
)
@api_view(['POST'])
@permission_classes([CanManageReports])
def report_request_change(request):
    serializer = ReportCommentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        report = request_report_change(admin=request.user, **serializer.validated_data)
    except ReportsServiceError as e:
        return _error_response(e)

    return _report_response('Change request submitted. The requester can edit the report.', report)


@extend_schema(
    request=ReportIdSerializer,
    responses={200: ReportResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Close a report. The expense closes too once all of its reports are closed.",
    tags=['reports'],
)
@api_view(['POST'])
@permission_classes([CanCloseReports])
def report_close(request):
    serializer = ReportIdSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = close_report(actor=request.user, **serializer.validated_data)
    except ReportsServiceError as e:
        return _error_response(e)

    response = _report_response('Report closed successfully', result['report'])
    response.data['expense_closed'] = result['expense_closed']
    return response


@extend_schema(
    request=AddReportNoteSerializer,
    responses={200: ReportNoteSerializer(many=True), 201: ReportNoteSerializer, 403: ErrorResponseSerializer},
    description="GET lists notes on a report (report_id query parameter); POST adds one.",
    tags=['reports'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsActiveUser])
def report_notes(request):
    if request.method == 'GET':
        params = ReportIdSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        try:
            notes = list_report_notes(user=request.user, **params.validated_data)
        except ReportsServiceError as e:
            return _error_response(e)
        return Response({'notes': ReportNoteSerializer(notes, many=True).data})

    serializer = AddReportNoteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        note = add_report_note(author=request.user, **serializer.validated_data)
    except ReportsServiceError as e:
        return _error_response(e)

    return Response({
        'message': 'Note added successfully',
        'note': ReportNoteSerializer(note).data,
    }, status=status.HTTP_201_CREATED)
