from django.urls import path

from . import views

app_name = 'games'

urlpatterns = [
    # 목록 / 검색 (id catch-all 보다 먼저)
    path('list/', views.game_list, name='list'),
    path('hot/', views.hot_games, name='hot'),
    path('popular/', views.popular_games, name='popular'),
    path('search/', views.game_search, name='search'),
    path('recommended/', views.recommended_games, name='recommended'),

    # 게임 상세 (IGDB ID)
    path('<int:igdb_id>/', views.game_detail, name='detail'),
    path('<int:igdb_id>/similar/', views.similar_games, name='similar'),
]
