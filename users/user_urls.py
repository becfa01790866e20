from django.urls import path

from . import user_views

urlpatterns = [
    path('update-profile/', user_views.update_profile, name='update_profile'),
    path('update-privacy/', user_views.update_privacy, name='update_privacy'),
    path('follow/', user_views.toggle_follow, name='follow'),
    path('review-count/', user_views.review_count, name='review_count'),
    path('delete-account/', user_views.delete_account, name='delete_account'),

    # 알림
    path('notifications/', user_views.notifications, name='notifications'),
    path('notifications/read/', user_views.mark_notifications_read, name='notifications_read'),

    # 프로필 (username)
    path('profile/<str:username>/', user_views.profile, name='profile'),
    path('profile/<str:username>/followers/', user_views.followers, name='followers'),
    path('profile/<str:username>/following/', user_views.following, name='following'),
]
