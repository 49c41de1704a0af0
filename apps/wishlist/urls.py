from django.urls import path
from . import views

app_name = 'wishlist'

urlpatterns = [
    # Admin
    path('admin/wishlist/', views.admin_item_list, name='admin-item-list'),
    path('admin/wishlist/access-code/', views.access_code, name='access-code'),
    path('admin/wishlist/verify-code/', views.verify_code, name='verify-code'),
    path('admin/wishlist/<uuid:item_id>/', views.admin_item_detail, name='admin-item-detail'),
    path(
        'admin/wishlist/<uuid:item_id>/contributions/',
        views.admin_item_contributions,
        name='admin-item-contributions'
    ),
    path('admin/wishlist/<uuid:item_id>/confirmations/', views.gone, name='legacy-confirmations'),

    # Public
    path('dmv/wishlist/', views.gone, name='legacy-list'),
    path('dmv/wishlist/<uuid:item_id>/', views.public_item, name='public-item'),
    path('dmv/wishlist/<uuid:item_id>/confirm/', views.public_confirm, name='public-confirm'),
    path('dmv/wishlist/<uuid:item_id>/contribute/', views.public_contribute, name='public-contribute'),
]
