from django.urls import path

from . import views

urlpatterns = [
    # 리뷰
    path('reviews/create/', views.review_create, name='review_create'),
    path('reviews/delete/', views.review_delete, name='review_delete'),
    path('reviews/list/', views.review_list, name='review_list'),
    path('reviews/<int:review_id>/like/', views.review_vote, name='review_vote'),

    # 게임별 리뷰 (한줄평 있는 리뷰, 페이지네이션)
    path('games/<int:igdb_id>/reviews/', views.game_reviews, name='game_reviews'),

    # 온보딩 평점
    path('onboarding/ratings/', views.onboarding_ratings, name='onboarding_ratings'),
]
