"""
회원가입 인증 메일 발송
"""
import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from .models import VerificationToken

logger = logging.getLogger(__name__)

CODE_TTL = timedelta(hours=24)


def generate_verification_code():
    """6자리 숫자 인증 코드"""
    return f"{secrets.randbelow(900000) + 100000}"


def issue_verification_token(email):
    """기존 코드를 지우고 새 코드를 발급 (24시간 유효)"""
    VerificationToken.objects.filter(email=email).delete()
    return VerificationToken.objects.create(
        email=email,
        token=generate_verification_code(),
        expires=timezone.now() + CODE_TTL,
    )


def send_verification_email(email, code):
    """
    인증 코드 메일 발송

    발송 실패는 가입을 막지 않습니다. 로그만 남기고 False 반환.
    """
    if settings.DEBUG:
        logger.info(f"[개발 모드] 인증 코드 {email}: {code}")

    subject = '[GampFire] 이메일 인증 코드'
    message = (
        f"겜프파이어 가입을 환영합니다!\n\n"
        f"인증 코드: {code}\n\n"
        f"이 코드는 24시간 동안 유효합니다.\n"
        f"본인이 요청하지 않았다면 이 메일을 무시해주세요."
    )
    try:
        send_mail(subject, message, settings.DEFAULT_FROM_EMAIL, [email])
    except Exception as e:
        logger.error(f"Failed to send verification email to {email}: {e}")
        return False
    return True
