from django.urls import path
from . import views

app_name = 'community'

urlpatterns = [
    path('', views.community_list, name='list'),
    path('search/', views.community_search, name='search'),
    path('create/', views.community_create, name='create'),

    path('<int:community_id>/', views.community_detail, name='detail'),
    path('<int:community_id>/update/', views.community_update, name='update'),
    path('<int:community_id>/check-owner/', views.check_owner, name='check-owner'),
    path('<int:community_id>/join/', views.community_join, name='join'),
    path('<int:community_id>/leave/', views.community_leave, name='leave'),
    path('<int:community_id>/check-nickname/', views.check_nickname, name='check-nickname'),

    path('<int:community_id>/categories/', views.category_list_create, name='category-list'),
    path('<int:community_id>/categories/<int:category_id>/', views.category_detail, name='category-detail'),
    path('<int:community_id>/boards/', views.board_list_create, name='board-list'),
    path('<int:community_id>/boards/<int:board_id>/', views.board_detail, name='board-detail'),

    path('<int:community_id>/members/', views.member_list, name='member-list'),
    path('<int:community_id>/members/<int:member_id>/', views.member_remove, name='member-remove'),
    path('<int:community_id>/members/<int:member_id>/role/', views.member_role, name='member-role'),

    path('<int:community_id>/posts/', views.post_list, name='post-list'),
    path('<int:community_id>/posts/create/', views.post_create, name='post-create'),
    path('<int:community_id>/posts/<int:post_id>/', views.post_detail, name='post-detail'),
    path('<int:community_id>/posts/<int:post_id>/edit/', views.post_edit, name='post-edit'),
    path('<int:community_id>/posts/<int:post_id>/like/', views.post_like, name='post-like'),
    path('<int:community_id>/posts/<int:post_id>/comments/', views.comment_list_create, name='comment-list'),
    path(
        '<int:community_id>/posts/<int:post_id>/comments/<int:comment_id>/',
        views.comment_delete,
        name='comment-delete',
    ),
]
