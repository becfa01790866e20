from rest_framework import serializers

from users.serializers import UserSummarySerializer

from .models import Board, Category, Comment, Community, CommunityMember, Post


# 커뮤니티 직렬화 (member_count / post_count 는 annotate 된 값)
class CommunitySerializer(serializers.ModelSerializer):
    owner = UserSummarySerializer(read_only=True)
    gameId = serializers.IntegerField(source='game.igdb_id', read_only=True)
    memberCount = serializers.IntegerField(source='member_count', read_only=True)
    postCount = serializers.IntegerField(source='post_count', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Community
        fields = ['id', 'name', 'description', 'image', 'gameId', 'owner', 'memberCount', 'postCount', 'createdAt']


class CommunityWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, error_messages={'required': '이름을 입력해주세요.', 'blank': '이름을 입력해주세요.'})
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    image = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
    gameId = serializers.IntegerField(required=False, allow_null=True)


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'order']


class BoardSerializer(serializers.ModelSerializer):
    categoryId = serializers.IntegerField(source='category_id', read_only=True)
    isNoticeBoard = serializers.BooleanField(source='is_notice_board', read_only=True)
    postCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Board
        fields = ['id', 'name', 'description', 'order', 'categoryId', 'isNoticeBoard', 'postCount', 'createdAt']

    def get_postCount(self, obj):
        # 목록 조회에서는 annotate 된 값을 사용
        count = getattr(obj, 'post_count', None)
        return count if count is not None else obj.posts.count()


class BoardWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=50, error_messages={'required': '게시판 이름을 입력해주세요.', 'blank': '게시판 이름을 입력해주세요.'})
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    categoryId = serializers.IntegerField(required=False, allow_null=True)
    isNoticeBoard = serializers.BooleanField(required=False, default=False)


class MemberSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    joinedAt = serializers.DateTimeField(source='joined_at', read_only=True)

    class Meta:
        model = CommunityMember
        fields = ['id', 'role', 'nickname', 'joinedAt', 'user']


class BoardSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Board
        fields = ['id', 'name']


# 댓글 직렬화
class CommentSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Comment
        fields = ['id', 'content', 'user', 'createdAt']


# 게시글 목록용 (comment_count / like_count 는 annotate 된 값)
class PostSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    board = BoardSummarySerializer(read_only=True)
    isNotice = serializers.BooleanField(source='is_notice', read_only=True)
    viewCount = serializers.IntegerField(source='view_count', read_only=True)
    commentCount = serializers.IntegerField(source='comment_count', read_only=True, default=0)
    likeCount = serializers.IntegerField(source='like_count', read_only=True, default=0)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Post
        fields = [
            'id', 'title', 'content', 'tags', 'isNotice', 'viewCount', 'commentCount', 'likeCount',
            'user', 'board', 'createdAt', 'updatedAt',
        ]


# 게시글 상세 (댓글 포함)
class PostDetailSerializer(PostSerializer):
    comments = CommentSerializer(many=True, read_only=True)
    isLiked = serializers.SerializerMethodField()

    class Meta(PostSerializer.Meta):
        fields = PostSerializer.Meta.fields + ['comments', 'isLiked']

    def get_isLiked(self, obj):
        user = self.context['request'].user
        if user.is_authenticated:
            return obj.likes.filter(user=user).exists()
        return False


class PostWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    content = serializers.CharField()
    boardId = serializers.IntegerField()
    tags = serializers.ListField(child=serializers.CharField(max_length=30), required=False, default=list)
    isNotice = serializers.BooleanField(required=False, default=False)
