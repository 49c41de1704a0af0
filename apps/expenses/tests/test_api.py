import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.expenses.models import (
    ExpenseRequest,
    ExpenseStatus,
    ExpenseCategory,
    ExpenseItemApproval,
    Approval,
    Account,
)


# =============================================================================
# Expense CRUD
# =============================================================================

@pytest.mark.django_db
class TestExpenseCreate:
    """Tests for POST /api/expenses/create/"""

    def test_create_expense(self, leader_client, leader_user, expense_payload):
        url = reverse('expenses:expense-create')
        response = leader_client.post(url, expense_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        expense = ExpenseRequest.objects.get(title='Youth night snacks')
        assert expense.requester == leader_user
        assert expense.status == ExpenseStatus.SUBMITTED
        assert len(response.data['expense']['items']) == 2
        assert response.data['expense']['status_events'][0]['to_status'] == ExpenseStatus.SUBMITTED

    def test_unauthenticated(self, api_client, expense_payload):
        url = reverse('expenses:expense-create')
        response = api_client.post(url, expense_payload, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_invalid_team(self, leader_client, expense_payload):
        expense_payload['team'] = 'CHOIR'
        url = reverse('expenses:expense-create')
        response = leader_client.post(url, expense_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Validation error'
        assert 'team' in response.data['details']

    def test_items_required(self, leader_client, expense_payload):
        expense_payload['items'] = []
        url = reverse('expenses:expense-create')
        response = leader_client.post(url, expense_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'items' in response.data['details']

    def test_special_event_requires_date(self, leader_client, expense_payload):
        expense_payload['category'] = ExpenseCategory.SPECIAL_EVENTS_AND_PROGRAMS
        url = reverse('expenses:expense-create')
        response = leader_client.post(url, expense_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'event_date' in response.data['details']

    def test_event_items_must_match_budget(self, leader_client, expense_payload):
        expense_payload.update({
            'category': ExpenseCategory.SPECIAL_EVENTS_AND_PROGRAMS,
            'event_date': '2026-12-24',
            'event_name': 'Carol night',
            'full_event_budget_cents': 9000,
        })
        url = reverse('expenses:expense-create')
        response = leader_client.post(url, expense_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'items' in response.data['details']

    def test_event_expense_created(self, leader_client, expense_payload):
        expense_payload.update({
            'category': ExpenseCategory.SPECIAL_EVENTS_AND_PROGRAMS,
            'event_date': '2026-12-24',
            'event_name': 'Carol night',
            'full_event_budget_cents': 4500,
        })
        url = reverse('expenses:expense-create')
        response = leader_client.post(url, expense_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['expense']['event_name'] == 'Carol night'


@pytest.mark.django_db
class TestExpenseListAndDetail:
    """Tests for GET /api/expenses/ and /api/expenses/<id>/"""

    def test_leader_sees_only_own(self, leader_client, other_leader, expense_factory):
        own = expense_factory()
        expense_factory(requester=other_leader, title='Not mine')

        response = leader_client.get(reverse('expenses:expense-list'))

        assert response.status_code == status.HTTP_200_OK
        assert [e['id'] for e in response.data['expenses']] == [str(own.id)]
        assert response.data['pagination'] == {'page': 1, 'limit': 20, 'total': 1, 'pages': 1}

    def test_admin_sees_all(self, admin_client, other_leader, expense_factory):
        expense_factory()
        expense_factory(requester=other_leader)

        response = admin_client.get(reverse('expenses:expense-list'))

        assert response.data['pagination']['total'] == 2

    def test_filter_and_limit(self, admin_client, expense_factory):
        for position in range(3):
            expense_factory(title=f'Submitted {position}')
        expense_factory(status=ExpenseStatus.APPROVED, title='Approved one')

        response = admin_client.get(reverse('expenses:expense-list'), {'status': 'SUBMITTED', 'limit': 2})

        assert len(response.data['expenses']) == 2
        assert response.data['pagination'] == {'page': 1, 'limit': 2, 'total': 3, 'pages': 2}

    def test_search(self, admin_client, expense_factory):
        expense_factory(title='Projector bulbs')
        expense_factory(title='Sound equipment')

        response = admin_client.get(reverse('expenses:expense-list'), {'search': 'projector'})

        assert [e['title'] for e in response.data['expenses']] == ['Projector bulbs']

    def test_detail_for_owner(self, leader_client, submitted_expense):
        url = reverse('expenses:expense-detail', kwargs={'expense_id': submitted_expense.id})
        response = leader_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(submitted_expense.id)
        assert len(response.data['items']) == 2

    def test_detail_forbidden_for_other_leader(self, other_leader_client, submitted_expense):
        url = reverse('expenses:expense-detail', kwargs={'expense_id': submitted_expense.id})
        response = other_leader_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_detail_for_pastor(self, pastor_client, submitted_expense):
        url = reverse('expenses:expense-detail', kwargs={'expense_id': submitted_expense.id})
        response = pastor_client.get(url)

        assert response.status_code == status.HTTP_200_OK


@pytest.mark.django_db
class TestExpenseUpdate:
    """Tests for PUT /api/expenses/update/"""

    def test_update_change_requested(self, leader_client, expense_factory, expense_payload):
        expense = expense_factory(status=ExpenseStatus.CHANGE_REQUESTED)
        expense_payload['expense_id'] = str(expense.id)

        response = leader_client.put(reverse('expenses:expense-update'), expense_payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['expense']['status'] == ExpenseStatus.SUBMITTED
        assert response.data['expense']['title'] == 'Youth night snacks'

    def test_update_approved_rejected(self, leader_client, approved_expense, expense_payload):
        expense_payload['expense_id'] = str(approved_expense.id)

        response = leader_client.put(reverse('expenses:expense-update'), expense_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'This expense request cannot be edited'

    def test_update_not_found(self, leader_client, expense_payload):
        expense_payload['expense_id'] = '00000000-0000-0000-0000-000000000000'

        response = leader_client.put(reverse('expenses:expense-update'), expense_payload, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Workflow endpoints
# =============================================================================

@pytest.mark.django_db
class TestWorkflowEndpoints:

    def test_approve(self, admin_client, submitted_expense):
        response = admin_client.post(
            reverse('expenses:expense-approve'), {'expense_id': str(submitted_expense.id)}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['expense']['status'] == ExpenseStatus.APPROVED

    def test_leader_cannot_approve(self, leader_client, submitted_expense):
        response = leader_client.post(
            reverse('expenses:expense-approve'), {'expense_id': str(submitted_expense.id)}, format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        submitted_expense.refresh_from_db()
        assert submitted_expense.status == ExpenseStatus.SUBMITTED

    def test_deny_requires_reason(self, admin_client, submitted_expense):
        response = admin_client.post(
            reverse('expenses:expense-deny'), {'expense_id': str(submitted_expense.id)}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'reason' in response.data['details']

    def test_deny(self, admin_client, submitted_expense):
        response = admin_client.post(
            reverse('expenses:expense-deny'),
            {'expense_id': str(submitted_expense.id), 'reason': 'Over budget'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['expense']['status'] == ExpenseStatus.DENIED

    def test_deny_with_invalid_id(self, admin_client):
        response = admin_client.post(
            reverse('expenses:expense-deny'), {'expense_id': 'not-a-uuid', 'reason': 'x'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'expense_id' in response.data['details']

    def test_undo_approval(self, admin_client, admin_user, approved_expense):
        Approval.objects.create(expense=approved_expense, approver=admin_user, status='APPROVED')

        response = admin_client.post(
            reverse('expenses:expense-undo-approval'), {'expense_id': str(approved_expense.id)}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['expense']['status'] == ExpenseStatus.SUBMITTED
        assert not Approval.objects.filter(expense=approved_expense).exists()

    def test_undo_on_submitted_is_error(self, admin_client, submitted_expense):
        response = admin_client.post(
            reverse('expenses:expense-undo-approval'), {'expense_id': str(submitted_expense.id)}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_status(self, admin_client, submitted_expense):
        response = admin_client.post(
            reverse('expenses:expense-update-status'),
            {'expense_id': str(submitted_expense.id), 'status': 'CHANGE_REQUESTED'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['expense']['status'] == ExpenseStatus.CHANGE_REQUESTED

    def test_update_status_rejects_approved_target(self, admin_client, submitted_expense):
        response = admin_client.post(
            reverse('expenses:expense-update-status'),
            {'expense_id': str(submitted_expense.id), 'status': 'APPROVED'},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_admin_change_request_requires_comment(self, admin_client, submitted_expense):
        response = admin_client.post(
            reverse('expenses:expense-admin-change-request'),
            {'expense_id': str(submitted_expense.id)},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_requester_change_request(self, leader_client, approved_expense):
        response = leader_client.post(
            reverse('expenses:expense-request-change'),
            {'expense_id': str(approved_expense.id), 'comment': 'Forgot the extension cords'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['expense']['status'] == ExpenseStatus.CHANGE_REQUESTED

    def test_requester_change_request_other_user(self, other_leader_client, approved_expense):
        response = other_leader_client.post(
            reverse('expenses:expense-request-change'),
            {'expense_id': str(approved_expense.id)},
            format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestPaymentEndpoints:

    def test_mark_paid(self, admin_client, approved_expense):
        response = admin_client.post(
            reverse('expenses:expense-mark-paid'),
            {'expense_id': str(approved_expense.id), 'report_required': False, 'paid_by': 'Treasurer'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['expense']['status'] == ExpenseStatus.PAID
        assert response.data['expense']['paid_by'] == 'Treasurer'
        assert response.data['is_repayment'] is False

    def test_mark_paid_twice(self, admin_client, approved_expense):
        url = reverse('expenses:expense-mark-paid')
        admin_client.post(url, {'expense_id': str(approved_expense.id)}, format='json')
        response = admin_client.post(url, {'expense_id': str(approved_expense.id)}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Expense request has already been marked as paid'

    def test_pastor_cannot_mark_paid(self, pastor_client, approved_expense):
        response = pastor_client.post(
            reverse('expenses:expense-mark-paid'), {'expense_id': str(approved_expense.id)}, format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        approved_expense.refresh_from_db()
        assert approved_expense.paid_at is None

    def test_close(self, admin_client, paid_expense):
        response = admin_client.post(
            reverse('expenses:expense-close'), {'expense_id': str(paid_expense.id)}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['expense']['status'] == ExpenseStatus.CLOSED
        assert response.data['expense']['report_required'] is False


# =============================================================================
# Item endpoints
# =============================================================================

@pytest.mark.django_db
class TestItemEndpoints:

    def test_approve_item(self, admin_client, first_item):
        response = admin_client.post(
            reverse('expenses:item-approve'),
            {'item_id': str(first_item.id), 'approved_amount_cents': 5000},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['approval']['approved_amount_cents'] == 5000

    def test_leader_cannot_deny_item(self, leader_client, first_item):
        response = leader_client.post(
            reverse('expenses:item-deny'),
            {'item_id': str(first_item.id), 'comment': 'No'},
            format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not ExpenseItemApproval.objects.filter(item=first_item).exists()

    def test_deny_item_requires_comment(self, admin_client, first_item):
        response = admin_client.post(
            reverse('expenses:item-deny'), {'item_id': str(first_item.id)}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_change_request_item(self, admin_client, first_item):
        response = admin_client.post(
            reverse('expenses:item-change-request'),
            {'item_id': str(first_item.id), 'comment': 'Need a quote'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['approval']['status'] == 'CHANGE_REQUESTED'

    def test_item_of_approved_expense_rejected(self, admin_client, approved_expense):
        item = approved_expense.items.first()
        response = admin_client.post(
            reverse('expenses:item-approve'), {'item_id': str(item.id)}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_undo_item(self, admin_client, admin_user, first_item):
        ExpenseItemApproval.objects.create(item=first_item, approver=admin_user, status='APPROVED')

        response = admin_client.post(
            reverse('expenses:item-undo-approval'), {'item_id': str(first_item.id)}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert not ExpenseItemApproval.objects.filter(item=first_item).exists()

    def test_unknown_item(self, admin_client):
        response = admin_client.post(
            reverse('expenses:item-approve'),
            {'item_id': '00000000-0000-0000-0000-000000000000'},
            format='json'
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_category(self, admin_client, first_item):
        response = admin_client.post(
            reverse('expenses:item-update-category'),
            {'item_id': str(first_item.id), 'category': ExpenseCategory.RENT},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['item']['category'] == ExpenseCategory.RENT


# =============================================================================
# Tagging, notes, remarks
# =============================================================================

@pytest.mark.django_db
class TestTaggingNotesRemarks:

    def test_update_account(self, admin_client, approved_expense):
        response = admin_client.post(
            reverse('expenses:expense-update-account'),
            {'expense_id': str(approved_expense.id), 'account': Account.CCI_DMV_CHECKINGS},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['expense']['account'] == Account.CCI_DMV_CHECKINGS

    def test_update_type_rejects_unknown_type(self, admin_client, approved_expense):
        response = admin_client.post(
            reverse('expenses:expense-update-type'),
            {'expense_id': str(approved_expense.id), 'expense_type': 'Gift card'},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_type(self, admin_client, approved_expense):
        response = admin_client.post(
            reverse('expenses:expense-update-type'),
            {
                'expense_id': str(approved_expense.id),
                'expense_type': 'Internal Transfer',
                'destination_account': Account.CCI_GLOBAL,
            },
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['expense']['expense_type'] == 'Internal Transfer'
        assert response.data['expense']['destination_account'] == Account.CCI_GLOBAL

    def test_leader_cannot_tag(self, leader_client, approved_expense):
        response = leader_client.post(
            reverse('expenses:expense-update-account'),
            {'expense_id': str(approved_expense.id), 'account': Account.CCI_DMV_CHECKINGS},
            format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_notes_round_trip(self, leader_client, admin_client, submitted_expense):
        url = reverse('expenses:expense-notes')
        response = admin_client.post(url, {'expense_id': str(submitted_expense.id), 'note': 'Receipt?'}, format='json')
        assert response.status_code == status.HTTP_201_CREATED

        response = leader_client.get(url, {'expense_id': str(submitted_expense.id)})

        assert response.status_code == status.HTTP_200_OK
        assert [note['note'] for note in response.data['notes']] == ['Receipt?']

    def test_pastor_remark(self, pastor_client, submitted_expense):
        response = pastor_client.post(
            reverse('expenses:expense-pastor-remark'),
            {'expense_id': str(submitted_expense.id), 'remark': 'Approved by campus'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['remark']['remark'] == 'Approved by campus'

    def test_admin_cannot_add_pastor_remark(self, admin_client, submitted_expense):
        response = admin_client.post(
            reverse('expenses:expense-pastor-remark'),
            {'expense_id': str(submitted_expense.id), 'remark': 'Hi'},
            format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Export and dashboard
# =============================================================================

@pytest.mark.django_db
class TestExportAndDashboard:

    def test_export_csv(self, admin_client, submitted_expense):
        response = admin_client.get(reverse('expenses:expense-export-csv'))

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'].startswith('text/csv')
        filename = f'expenses_{timezone.localdate().isoformat()}.csv'
        assert filename in response['Content-Disposition']

        lines = b''.join(response.streaming_content).decode().splitlines()
        assert lines[0] == 'ID,Title,Amount,Team,Requester,Description,Urgency,Status,Created At,Updated At,Paid At'
        assert lines[1].startswith(f'{submitted_expense.id},Sound equipment,100.00,CCW,Leader User,')
        assert 'Urgent (This Month),SUBMITTED' in lines[1]

    def test_export_filters(self, admin_client, expense_factory):
        expense_factory(status=ExpenseStatus.APPROVED)
        expense_factory(status=ExpenseStatus.SUBMITTED)

        response = admin_client.get(reverse('expenses:expense-export-csv'), {'status': 'APPROVED'})

        lines = b''.join(response.streaming_content).decode().splitlines()
        assert len(lines) == 2

    def test_leader_cannot_export(self, leader_client):
        response = leader_client.get(reverse('expenses:expense-export-csv'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_dashboard(self, leader_client, expense_factory):
        expense_factory(status=ExpenseStatus.APPROVED, item_amounts=(2500,))

        response = leader_client.get(reverse('expenses:expense-dashboard'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_approved_cents'] == 2500
        assert len(response.data['recent_expenses']) == 1
