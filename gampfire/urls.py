"""
URL configuration for GampFire.
프론트엔드와 연동되는 JSON API 서버
"""
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

# JWT Token Views
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
)

from games import views as game_views

urlpatterns = [
    path('admin/', admin.site.urls),

    # ===== API 엔드포인트 =====
    # JWT 인증
    path('api/auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # 사용자 관련 API
    path('api/auth/', include('users.api_urls')),
    path('api/user/', include('users.user_urls')),
    path('api/admin/', include('users.admin_urls')),

    # 게임 관련 API
    path('api/games/', include('games.urls')),

    # 리뷰 / 온보딩 API
    path('api/', include('reviews.urls')),

    # 커뮤니티 API
    path('api/communities/', include('community.urls')),

    # 배치 작업
    path('api/batch/update-hot-scores/', game_views.batch_update_hot_scores, name='batch-update-hot-scores'),
    path('api/batch/update-tags/', game_views.batch_update_tags, name='batch-update-tags'),
]

# 개발 환경에서 미디어 파일 서빙
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
