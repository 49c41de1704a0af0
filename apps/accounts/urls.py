from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # Authentication
    path('auth/register/', views.register, name='register'),
    path('auth/verify/', views.verify_email, name='verify'),
    path('auth/set-password/', views.set_password, name='set-password'),
    path('auth/login/', views.login, name='login'),
    path('auth/logout/', views.logout, name='logout'),

    # Password reset
    path('auth/forgot-password/', views.forgot_password, name='forgot-password'),
    path('auth/reset-password/', views.confirm_password_reset, name='reset-password'),

    # Profile
    path('auth/me/', views.get_current_user, name='current-user'),
    path('profile/update/', views.update_profile_view, name='update-profile'),

    # User administration
    path('users/', views.user_list, name='user-list'),
    path('users/approve/', views.approve_user_view, name='user-approve'),
    path('users/deny/', views.deny_user_view, name='user-deny'),
    path('users/suspend/', views.suspend_user_view, name='user-suspend'),
    path('users/update-role/', views.update_user_role_view, name='user-update-role'),
    path('users/update-status/', views.update_user_status_view, name='user-update-status'),
]
