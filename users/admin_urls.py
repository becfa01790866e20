from django.urls import path

from . import admin_views

urlpatterns = [
    path('users/', admin_views.user_list, name='admin_users'),
    path('users/update-role/', admin_views.update_role, name='admin_update_role'),
    path('users/update-username/', admin_views.update_username, name='admin_update_username'),
    path('users/delete/', admin_views.delete_user, name='admin_delete_user'),
    path('reviews/', admin_views.review_list, name='admin_reviews'),
    path('reviews/delete/', admin_views.review_delete, name='admin_delete_review'),
]
