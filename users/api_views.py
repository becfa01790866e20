"""
users 앱의 인증 API Views

이메일 인증 기반 회원가입 → 인증 → JWT 로그인 흐름
"""
import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import make_password
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from .emails import issue_verification_token, send_verification_email
from .models import PendingUser, VerificationToken
from .serializers import SignupSerializer, UserSerializer, first_error

logger = logging.getLogger(__name__)

User = get_user_model()


class SignupView(APIView):
    """
    회원가입 API (인증 대기 상태로 저장 후 인증 코드 메일 발송)
    POST /api/auth/signup/
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = SignupSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'detail': first_error(serializer.errors)}, status=status.HTTP_400_BAD_REQUEST)

        username = serializer.validated_data['username']
        email = serializer.validated_data['email']
        password = serializer.validated_data['password']

        # 다른 이메일로 대기 중인 가입도 아이디를 점유
        username_taken = (
            User.objects.filter(username=username).exists()
            or PendingUser.objects.filter(username=username).exclude(email=email).exists()
        )
        if username_taken:
            return Response({'detail': '이미 사용 중인 아이디입니다.'}, status=status.HTTP_400_BAD_REQUEST)

        if User.objects.filter(email=email).exists():
            return Response({'detail': '이미 가입된 이메일입니다.'}, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            PendingUser.objects.filter(email=email).delete()
            PendingUser.objects.create(
                username=username,
                email=email,
                password=make_password(password),
                name=username,
                expires_at=PendingUser.default_expiry(),
            )
            token = issue_verification_token(email)

        send_verification_email(email, token.token)
        logger.info(f"Pending signup created: {username} <{email}>")

        return Response({
            'success': True,
            'message': '회원가입이 완료되었습니다. 이메일을 확인해주세요.',
            'email': email,
        }, status=status.HTTP_201_CREATED)


class VerifyEmailView(APIView):
    """
    이메일 인증 API (인증 코드 확인 → 실제 User 생성)
    POST /api/auth/verify/
    """
    permission_classes = [AllowAny]

    def post(self, request):
        email = (request.data.get('email') or '').strip()
        code = str(request.data.get('code') or '').strip()
        if not email or not code:
            return Response({'detail': '이메일과 인증 코드를 입력해주세요.'}, status=status.HTTP_400_BAD_REQUEST)

        token = VerificationToken.objects.filter(email=email, token=code).first()
        if token is None:
            return Response({'detail': '유효하지 않은 인증 코드입니다.'}, status=status.HTTP_400_BAD_REQUEST)

        if token.is_expired():
            token.delete()
            return Response(
                {'detail': '인증 코드가 만료되었습니다. 새로운 코드를 요청해주세요.'},
                status=status.HTTP_400_BAD_REQUEST,
            )

        pending = PendingUser.objects.filter(email=email).first()
        if pending is None:
            return Response(
                {'detail': '가입 정보를 찾을 수 없습니다. 다시 회원가입해주세요.'},
                status=status.HTTP_404_NOT_FOUND,
            )

        try:
            with transaction.atomic():
                # 이미 해시된 비밀번호를 그대로 옮김
                user = User.objects.create(
                    username=pending.username,
                    email=pending.email,
                    name=pending.name,
                    password=pending.password,
                    image='/default-avatar.png',
                    email_verified=timezone.now(),
                )
                pending.delete()
                VerificationToken.objects.filter(email=email).delete()
        except IntegrityError:
            # 인증 대기 중에 다른 계정이 같은 아이디를 가져간 경우
            logger.warning(f"Username taken before verification: {pending.username}")
            return Response({'detail': '이미 사용 중인 아이디입니다.'}, status=status.HTTP_400_BAD_REQUEST)

        logger.info(f"User verified: {user.username}")
        return Response({'success': True, 'message': '이메일 인증이 완료되었습니다!'})


class ResendCodeView(APIView):
    """
    인증 코드 재발송 API
    POST /api/auth/resend-code/
    """
    permission_classes = [AllowAny]

    def post(self, request):
        email = (request.data.get('email') or '').strip()
        if not email:
            return Response({'detail': '이메일을 입력해주세요.'}, status=status.HTTP_400_BAD_REQUEST)

        if not PendingUser.objects.filter(email=email).exists():
            if User.objects.filter(email=email).exists():
                return Response({'detail': '이미 인증된 계정입니다.'}, status=status.HTTP_400_BAD_REQUEST)
            return Response(
                {'detail': '등록되지 않은 이메일입니다. 먼저 회원가입을 해주세요.'},
                status=status.HTTP_404_NOT_FOUND,
            )

        token = issue_verification_token(email)
        send_verification_email(email, token.token)
        return Response({'success': True, 'message': '새로운 인증 코드가 이메일로 전송되었습니다.'})


class MeView(generics.RetrieveUpdateAPIView):
    """
    현재 사용자 정보 조회/수정 API
    GET /api/auth/me/
    PATCH /api/auth/me/
    """
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ['get', 'patch', 'head', 'options']

    def get_object(self):
        return self.request.user


class LogoutView(APIView):
    """
    로그아웃 API - Refresh Token 블랙리스트
    POST /api/auth/logout/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        refresh_token = request.data.get('refresh')
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'detail': '로그아웃되었습니다.'}, status=status.HTTP_200_OK)
