from rest_framework.permissions import BasePermission


class IsSiteAdmin(BasePermission):
    """is_staff 이거나 ADMIN_EMAIL 계정만 허용"""
    message = '관리자 권한이 필요합니다.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_site_admin())
