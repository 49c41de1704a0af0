"""
URL configuration for config project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/4.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from config.views import index, health_check

urlpatterns = [
    path('', index, name='home'),

    # Health check (for Render)
    path('api/health/', health_check, name='health-check'),

    # Django admin (kept off /admin/, which belongs to the wish list pages)
    path('django-admin/', admin.site.urls),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='api-schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='api-schema'), name='api-docs'),

    # API endpoints
    path('api/', include('apps.accounts.urls')),
    path('api/', include('apps.expenses.urls')),
    path('api/reports/', include('apps.reports.urls')),
    path('api/', include('apps.wishlist.urls')),
]


# Custom error handlers
handler404 = 'config.views.error_404'
handler500 = 'config.views.error_500'
