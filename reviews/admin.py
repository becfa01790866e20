from django.contrib import admin

from .models import Review, ReviewLike


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('user', 'game', 'rating', 'label', 'is_verified', 'likes_count', 'created_at')
    list_filter = ('label', 'is_verified', 'verification_type')
    search_fields = ('user__username', 'game__title', 'comment')
    ordering = ('-created_at',)
    readonly_fields = ('likes_count', 'created_at', 'updated_at')


@admin.register(ReviewLike)
class ReviewLikeAdmin(admin.ModelAdmin):
    list_display = ('user', 'review', 'type', 'created_at')
    list_filter = ('type',)
    search_fields = ('user__username',)
