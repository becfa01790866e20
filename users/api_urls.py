"""
users 앱의 인증 API URL 설정
"""
from django.urls import path
from . import api_views

urlpatterns = [
    # 회원가입 / 이메일 인증
    path('signup/', api_views.SignupView.as_view(), name='api_signup'),
    path('verify/', api_views.VerifyEmailView.as_view(), name='api_verify'),
    path('resend-code/', api_views.ResendCodeView.as_view(), name='api_resend_code'),

    # 현재 사용자 정보 조회/수정
    path('me/', api_views.MeView.as_view(), name='api_me'),

    # 로그아웃 (토큰 블랙리스트)
    path('logout/', api_views.LogoutView.as_view(), name='api_logout'),
]
