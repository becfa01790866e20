from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User, PendingUser, VerificationToken, Follow, Notification

# 커스텀 유저 모델을 관리자 페이지에 등록
@admin.register(User)
class CustomUserAdmin(UserAdmin):
    # 관리자 목록 화면에 보일 필드들
    list_display = ('username', 'email', 'name', 'role', 'email_verified', 'is_staff')
    list_filter = UserAdmin.list_filter + ('role',)

    # 상세 수정 화면에 보일 필드 그룹핑
    fieldsets = UserAdmin.fieldsets + (
        ('추가 정보', {'fields': ('name', 'avatar', 'image', 'role', 'steam_id', 'email_verified')}),
        ('공개 범위', {'fields': ('profile_visibility', 'review_visibility')}),
    )


@admin.register(PendingUser)
class PendingUserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'expires_at', 'created_at')
    search_fields = ('username', 'email')
    exclude = ('password',)


@admin.register(VerificationToken)
class VerificationTokenAdmin(admin.ModelAdmin):
    list_display = ('email', 'token', 'expires')
    search_fields = ('email',)


@admin.register(Follow)
class FollowAdmin(admin.ModelAdmin):
    list_display = ('follower', 'following', 'created_at')
    search_fields = ('follower__username', 'following__username')
    ordering = ('-created_at',)


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('user', 'type', 'message', 'is_read', 'created_at')
    list_filter = ('type', 'is_read')
    search_fields = ('user__username', 'message')
