from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    path('', views.report_list, name='report-list'),
    path('create/', views.report_create, name='report-create'),
    path('update/', views.report_update, name='report-update'),
    path('approve/', views.report_approve, name='report-approve'),
    path('deny/', views.report_deny, name='report-deny'),
    path('request-change/', views.report_request_change, name='report-request-change'),
    path('close/', views.report_close, name='report-close'),
    path('notes/', views.report_notes, name='report-notes'),
]
