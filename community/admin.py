from django.contrib import admin

from .models import Board, Category, Comment, Community, CommunityMember, Post


class CommunityMemberInline(admin.TabularInline):
    model = CommunityMember
    extra = 0


@admin.register(Community)
class CommunityAdmin(admin.ModelAdmin):
    list_display = ('name', 'owner', 'game', 'created_at')
    search_fields = ('name', 'description', 'owner__username')
    inlines = [CommunityMemberInline]


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    list_display = ('name', 'community', 'category', 'order', 'is_notice_board')
    list_filter = ('is_notice_board',)


admin.site.register(Category)


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ('title', 'community', 'board', 'user', 'is_notice', 'view_count', 'created_at')
    list_filter = ('is_notice',)
    search_fields = ('title', 'content', 'user__username')


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ('post', 'user', 'created_at')
