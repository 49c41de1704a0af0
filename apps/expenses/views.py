from django.http import StreamingHttpResponse
from django.utils import timezone
from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import Capability, IsActiveUser, require_capability
from .serializers import (
    ExpenseCreateSerializer,
    ExpenseUpdateSerializer,
    ApproveExpenseSerializer,
    DenyExpenseSerializer,
    ExpenseIdSerializer,
    UpdateExpenseStatusSerializer,
    ExpenseCommentSerializer,
    RequesterChangeRequestSerializer,
    MarkPaidSerializer,
    UpdateAccountSerializer,
    UpdateExpenseTypeSerializer,
    AddNoteSerializer,
    PastorRemarkInputSerializer,
    ApproveItemSerializer,
    ItemIdSerializer,
    ItemCommentSerializer,
    UpdateItemCategorySerializer,
    ExpenseFilterSerializer,
    ExpenseExportFilterSerializer,
    ExpenseListSerializer,
    ExpenseDetailSerializer,
    ExpenseItemSerializer,
    ExpenseItemApprovalSerializer,
    ExpenseNoteSerializer,
    PastorRemarkSerializer,
    DashboardSerializer,
)
from .services import (
    create_expense,
    update_expense,
    get_expense,
    get_expense_for_user,
    list_expenses,
    filter_expenses_for_export,
    get_dashboard_stats,
    approve_expense,
    deny_expense,
    undo_expense_approval,
    update_expense_status,
    admin_request_change,
    request_expense_change,
    close_expense,
    mark_expense_paid,
    update_account,
    update_expense_type,
    add_note,
    list_notes,
    upsert_pastor_remark,
    approve_item,
    deny_item,
    request_item_change,
    undo_item_approval,
    update_item_category,
    iter_expense_csv,
    get_csv_filename,
    # Exceptions
    ExpensesServiceError,
    ExpenseNotFoundError,
    ExpenseItemNotFoundError,
    ExpensePermissionError,
)


# Response serializers for API documentation
class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class ExpenseResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    expense = ExpenseDetailSerializer()


CanApproveExpenses = require_capability(
    Capability.APPROVE_EXPENSES, 'Insufficient permissions to approve expenses'
)
CanManageExpenses = require_capability(
    Capability.MANAGE_EXPENSES, 'Insufficient permissions to manage expenses'
)
CanMarkAsPaid = require_capability(
    Capability.MARK_AS_PAID, 'Insufficient permissions to mark expenses as paid'
)
CanUpdateExpenseItems = require_capability(
    Capability.UPDATE_EXPENSE_ITEMS, 'Insufficient permissions to update expenses'
)
CanAddPastorRemarks = require_capability(
    Capability.ADD_PASTOR_REMARKS, 'Only campus pastors can add remarks'
)
CanExportData = require_capability(
    Capability.EXPORT_DATA, 'Insufficient permissions to export data'
)


class ExpensePagination(PageNumberPagination):
    """Page/limit pagination for expense lists."""
    page_size = 20
    page_size_query_param = 'limit'
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response({
            'expenses': data,
            'pagination': {
                'page': self.page.number,
                'limit': self.get_page_size(self.request),
                'total': self.page.paginator.count,
                'pages': self.page.paginator.num_pages,
            },
        })


def _error_response(error):
    """Map a service exception to an error response."""
    if isinstance(error, (ExpenseNotFoundError, ExpenseItemNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, ExpensePermissionError):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(error)}, status=code)


def _expense_response(message, expense, **extra):
    body = {'message': message, 'expense': ExpenseDetailSerializer(get_expense(expense.id)).data}
    body.update(extra)
    return Response(body)


# =============================================================================
# Expense requests
# =============================================================================

@extend_schema(
    parameters=[ExpenseFilterSerializer],
    responses={200: ExpenseListSerializer(many=True)},
    description="List expenses. Users without VIEW_ALL_EXPENSES only see their own. Paginated with page/limit.",
    tags=['expenses'],
)
@api_view(['GET'])
@permission_classes([IsActiveUser])
def expense_list(request):
    filters = ExpenseFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)

    expenses = list_expenses(user=request.user, **filters.validated_data)

    paginator = ExpensePagination()
    page = paginator.paginate_queryset(expenses, request)
    return paginator.get_paginated_response(ExpenseListSerializer(page, many=True).data)


@extend_schema(
    request=ExpenseCreateSerializer,
    responses={201: ExpenseResponseSerializer, 400: ErrorResponseSerializer},
    description="Submit a new expense request. Approvers of the campus are notified.",
    tags=['expenses'],
)
@api_view(['POST'])
@permission_classes([IsActiveUser])
def expense_create(request):
    serializer = ExpenseCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        expense = create_expense(requester=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return Response({
        'message': 'Expense request created successfully',
        'expense': ExpenseDetailSerializer(get_expense(expense.id)).data,
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    responses={200: ExpenseDetailSerializer, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Get one expense with items, approvals, history and attachments.",
    tags=['expenses'],
)
@api_view(['GET'])
@permission_classes([IsActiveUser])
def expense_detail(request, expense_id):
    try:
        expense = get_expense_for_user(expense_id=expense_id, user=request.user)
    except ExpensesServiceError as e:
        return _error_response(e)

    return Response(ExpenseDetailSerializer(expense).data)


@extend_schema(
    request=ExpenseUpdateSerializer,
    responses={200: ExpenseResponseSerializer, 400: ErrorResponseSerializer, 403: ErrorResponseSerializer},
    description="Edit a submitted or change-requested expense. It is resubmitted for approval.",
    tags=['expenses'],
)
@api_view(['PUT', 'POST'])
@permission_classes([IsActiveUser])
def expense_update(request):
    serializer = ExpenseUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        expense = update_expense(actor=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return _expense_response('Expense request updated successfully', expense)


# =============================================================================
# Approval workflow
# =============================================================================

@extend_schema(
    request=ApproveExpenseSerializer,
    responses={200: ExpenseResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Approve an expense. With two-stage approval a stage 1 approval keeps it SUBMITTED.",
    tags=['expense-workflow'],
)
@api_view(['POST'])
@permission_classes([CanApproveExpenses])
def expense_approve(request):
    serializer = ApproveExpenseSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        expense = approve_expense(approver=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return _expense_response('Expense request approved successfully', expense)


@extend_schema(
    request=DenyExpenseSerializer,
    responses={200: ExpenseResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Deny a submitted expense. A reason is required.",
    tags=['expense-workflow'],
)
@api_view(['POST'])
@permission_classes([CanApproveExpenses])
def expense_deny(request):
    serializer = DenyExpenseSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        expense = deny_expense(approver=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return _expense_response('Expense request denied successfully', expense)


@extend_schema(
    request=ExpenseIdSerializer,
    responses={200: ExpenseResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Return an approved or denied expense to SUBMITTED and clear its approvals.",
    tags=['expense-workflow'],
)
@api_view(['POST'])
@permission_classes([CanApproveExpenses])
def expense_undo_approval(request):
    serializer = ExpenseIdSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        expense = undo_expense_approval(actor=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return _expense_response('Approval undone successfully', expense)


@extend_schema(
    request=UpdateExpenseStatusSerializer,
    responses={200: ExpenseResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Mark a submitted expense PARTIALLY_APPROVED or CHANGE_REQUESTED after item review.",
    tags=['expense-workflow'],
)
@api_view(['POST'])
@permission_classes([CanManageExpenses])
def expense_update_status(request):
    serializer = UpdateExpenseStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        expense = update_expense_status(actor=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return _expense_response('Expense status updated successfully', expense)


@extend_schema(
    request=ExpenseCommentSerializer,
    responses={200: ExpenseResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Send an expense back to its requester for changes.",
    tags=['expense-workflow'],
)
@api_view(['POST'])
@permission_classes([CanManageExpenses])
def expense_admin_change_request(request):
    serializer = ExpenseCommentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        expense = admin_request_change(admin=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return _expense_response('Change request sent successfully', expense)


@extend_schema(
    request=RequesterChangeRequestSerializer,
    responses={200: ExpenseResponseSerializer, 400: ErrorResponseSerializer, 403: ErrorResponseSerializer},
    description="Reopen your own approved expense for changes.",
    tags=['expense-workflow'],
)
@api_view(['POST'])
@permission_classes([IsActiveUser])
def expense_request_change(request):
    serializer = RequesterChangeRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        expense = request_expense_change(requester=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return _expense_response('Change request submitted successfully', expense)


@extend_schema(
    request=ExpenseIdSerializer,
    responses={200: ExpenseResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Close an expense without a report. Unpaid expenses are stamped paid.",
    tags=['expense-workflow'],
)
@api_view(['POST'])
@permission_classes([CanMarkAsPaid])
def expense_close(request):
    serializer = ExpenseIdSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        expense, payment_amount_cents = close_expense(actor=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return _expense_response(
        'Expense request closed successfully',
        expense,
        payment_amount_cents=payment_amount_cents,
    )


@extend_schema(
    request=MarkPaidSerializer,
    responses={200: ExpenseResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Mark an approved expense as paid, or pay the overage shown by its latest report.",
    tags=['expense-workflow'],
)
@api_view(['POST'])
@permission_classes([CanMarkAsPaid])
def expense_mark_paid(request):
    serializer = MarkPaidSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = mark_expense_paid(actor=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    if result['is_repayment']:
        message = 'Additional payment recorded successfully'
    else:
        message = 'Expense request marked as paid successfully'

    return _expense_response(
        message,
        result['expense'],
        payment_amount_cents=result['payment_amount_cents'],
        total_paid_amount_cents=result['total_paid_amount_cents'],
        is_repayment=result['is_repayment'],
    )


# =============================================================================
# Tagging, notes and remarks
# =============================================================================

@extend_schema(
    request=UpdateAccountSerializer,
    responses={200: ExpenseResponseSerializer, 404: ErrorResponseSerializer},
    description="Set the account an expense is paid from.",
    tags=['expenses'],
)
@api_view(['POST'])
@permission_classes([CanUpdateExpenseItems])
def expense_update_account(request):
    serializer = UpdateAccountSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        expense = update_account(**serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return _expense_response('Account updated successfully', expense)


@extend_schema(
    request=UpdateExpenseTypeSerializer,
    responses={200: ExpenseResponseSerializer, 404: ErrorResponseSerializer},
    description="Set the expense type and, when given, the destination account.",
    tags=['expenses'],
)
@api_view(['POST'])
@permission_classes([CanUpdateExpenseItems])
def expense_update_type(request):
    serializer = UpdateExpenseTypeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        expense = update_expense_type(**serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return _expense_response('Expense type updated successfully', expense)


@extend_schema(
    request=AddNoteSerializer,
    responses={200: ExpenseNoteSerializer(many=True), 201: ExpenseNoteSerializer, 403: ErrorResponseSerializer},
    description="GET lists notes on an expense (expense_id query parameter); POST adds one.",
    tags=['expenses'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsActiveUser])
def expense_notes(request):
    if request.method == 'GET':
        params = ExpenseIdSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        try:
            notes = list_notes(user=request.user, **params.validated_data)
        except ExpensesServiceError as e:
            return _error_response(e)
        return Response({'notes': ExpenseNoteSerializer(notes, many=True).data})

    serializer = AddNoteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        note = add_note(author=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return Response({
        'message': 'Note added successfully',
        'note': ExpenseNoteSerializer(note).data,
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    request=PastorRemarkInputSerializer,
    responses={200: PastorRemarkSerializer, 400: ErrorResponseSerializer, 403: ErrorResponseSerializer},
    description="Add or replace the campus pastor's remark on a submitted expense.",
    tags=['expenses'],
)
@api_view(['POST'])
@permission_classes([CanAddPastorRemarks])
def expense_pastor_remark(request):
    serializer = PastorRemarkInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        remark = upsert_pastor_remark(pastor=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return Response({
        'message': 'Remark saved successfully',
        'remark': PastorRemarkSerializer(remark).data,
    })


# =============================================================================
# Reporting
# =============================================================================

@extend_schema(
    parameters=[ExpenseExportFilterSerializer],
    responses={(200, 'text/csv'): str},
    description="Download matching expenses as CSV.",
    tags=['expenses'],
)
@api_view(['GET'])
@permission_classes([CanExportData])
def expense_export_csv(request):
    filters = ExpenseExportFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)

    expenses = filter_expenses_for_export(**filters.validated_data)

    response = StreamingHttpResponse(iter_expense_csv(expenses.iterator()), content_type='text/csv')
    filename = get_csv_filename(timezone.localdate())
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


@extend_schema(
    responses={200: DashboardSerializer},
    description="Dashboard totals, scoped like the expense list.",
    tags=['expenses'],
)
@api_view(['GET'])
@permission_classes([IsActiveUser])
def expense_dashboard(request):
    stats = get_dashboard_stats(user=request.user)
    return Response(DashboardSerializer(stats).data)


# =============================================================================
# Expense items
# =============================================================================

@extend_schema(
    request=ApproveItemSerializer,
    responses={200: ExpenseItemApprovalSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Approve an item of a submitted expense, optionally for a lower amount.",
    tags=['expense-items'],
)
@api_view(['POST'])
@permission_classes([CanApproveExpenses])
def item_approve(request):
    serializer = ApproveItemSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        approval = approve_item(approver=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return Response({
        'message': 'Item approved successfully',
        'approval': ExpenseItemApprovalSerializer(approval).data,
    })


@extend_schema(
    request=ItemCommentSerializer,
    responses={200: ExpenseItemApprovalSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Deny an item of a submitted expense. A comment is required.",
    tags=['expense-items'],
)
@api_view(['POST'])
@permission_classes([CanApproveExpenses])
def item_deny(request):
    serializer = ItemCommentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        approval = deny_item(approver=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return Response({
        'message': 'Item denied successfully',
        'approval': ExpenseItemApprovalSerializer(approval).data,
    })


@extend_schema(
    request=ItemCommentSerializer,
    responses={200: ExpenseItemApprovalSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Request changes to an item of a submitted expense.",
    tags=['expense-items'],
)
@api_view(['POST'])
@permission_classes([CanApproveExpenses])
def item_change_request(request):
    serializer = ItemCommentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        approval = request_item_change(approver=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return Response({
        'message': 'Change requested successfully',
        'approval': ExpenseItemApprovalSerializer(approval).data,
    })


@extend_schema(
    request=ItemIdSerializer,
    responses={200: MessageResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Remove your own decision on an item.",
    tags=['expense-items'],
)
@api_view(['POST'])
@permission_classes([CanApproveExpenses])
def item_undo_approval(request):
    serializer = ItemIdSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        undo_item_approval(approver=request.user, **serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return Response({'message': 'Item decision undone successfully'})


@extend_schema(
    request=UpdateItemCategorySerializer,
    responses={200: ExpenseItemSerializer, 404: ErrorResponseSerializer},
    description="Recategorize an expense item.",
    tags=['expense-items'],
)
@api_view(['POST'])
@permission_classes([CanUpdateExpenseItems])
def item_update_category(request):
    serializer = UpdateItemCategorySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        item = update_item_category(**serializer.validated_data)
    except ExpensesServiceError as e:
        return _error_response(e)

    return Response({
        'message': 'Item category updated successfully',
        'item': ExpenseItemSerializer(item).data,
    })
