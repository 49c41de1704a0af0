from django.urls import path
from . import views

app_name = 'expenses'

urlpatterns = [
    # Expense requests
    path('expenses/', views.expense_list, name='expense-list'),
    path('expenses/create/', views.expense_create, name='expense-create'),
    path('expenses/update/', views.expense_update, name='expense-update'),
    path('expenses/<uuid:expense_id>/', views.expense_detail, name='expense-detail'),

    # Workflow
    path('expenses/approve/', views.expense_approve, name='expense-approve'),
    path('expenses/deny/', views.expense_deny, name='expense-deny'),
    path('expenses/undo-approval/', views.expense_undo_approval, name='expense-undo-approval'),
    path('expenses/update-status/', views.expense_update_status, name='expense-update-status'),
    path('expenses/admin-change-request/', views.expense_admin_change_request, name='expense-admin-change-request'),
    path('expenses/request-change/', views.expense_request_change, name='expense-request-change'),
    path('expenses/close/', views.expense_close, name='expense-close'),
    path('expenses/mark-paid/', views.expense_mark_paid, name='expense-mark-paid'),

    # Tagging, notes and remarks
    path('expenses/update-account/', views.expense_update_account, name='expense-update-account'),
    path('expenses/update-type/', views.expense_update_type, name='expense-update-type'),
    path('expenses/notes/', views.expense_notes, name='expense-notes'),
    path('expenses/pastor-remark/', views.expense_pastor_remark, name='expense-pastor-remark'),

    # Reporting
    path('expenses/export-csv/', views.expense_export_csv, name='expense-export-csv'),
    path('expenses/dashboard/', views.expense_dashboard, name='expense-dashboard'),

    # Items
    path('expense-items/approve/', views.item_approve, name='item-approve'),
    path('expense-items/deny/', views.item_deny, name='item-deny'),
    path('expense-items/change-request/', views.item_change_request, name='item-change-request'),
    path('expense-items/undo-approval/', views.item_undo_approval, name='item-undo-approval'),
    path('expense-items/update-category/', views.item_update_category, name='item-update-category'),
]
