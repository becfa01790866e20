"""
커뮤니티(동아리) API

- 동아리 생성/검색/수정, 가입/탈퇴
- 카테고리, 게시판 관리 (동아리장 전용)
- 멤버 등급 관리
- 게시글/댓글/좋아요
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, F, Max, Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response

from games.models import Game
from users.serializers import first_error

from .models import Board, Category, Comment, Community, CommunityMember, Post, PostLike
from .serializers import (
    BoardSerializer,
    BoardWriteSerializer,
    CategorySerializer,
    CommentSerializer,
    CommunitySerializer,
    CommunityWriteSerializer,
    MemberSerializer,
    PostDetailSerializer,
    PostSerializer,
    PostWriteSerializer,
)

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10
CHANGEABLE_ROLES = ('member', 'moderator')


def _communities():
    return Community.objects.select_related('owner', 'game').annotate(
        member_count=Count('members', distinct=True),
        post_count=Count('posts', distinct=True),
    )


def _posts():
    return Post.objects.select_related('user', 'board').annotate(
        comment_count=Count('comments', distinct=True),
        like_count=Count('likes', distinct=True),
    )


def _bad_request(message):
    return Response({'detail': message}, status=status.HTTP_400_BAD_REQUEST)


def _forbidden(message='권한이 없습니다.'):
    return Response({'detail': message}, status=status.HTTP_403_FORBIDDEN)


def _next_order(queryset):
    current = queryset.aggregate(max_order=Max('order'))['max_order']
    return 0 if current is None else current + 1


def nickname_conflict(community, nickname):
    """
    동아리 내 별명 중복 확인

    다른 멤버의 별명이거나, 멤버의 아이디/이름과 같으면 사용할 수 없습니다.
    사용 가능하면 None, 아니면 안내 메시지를 반환합니다.
    """
    if community.members.filter(nickname=nickname).exists():
        return '이미 사용 중인 별명입니다.'
    if community.members.filter(Q(user__username=nickname) | Q(user__name=nickname)).exists():
        return '이미 사용 중인 이름입니다.'
    return None


# 1. 동아리 목록 (최신순)
@api_view(['GET'])
@permission_classes([AllowAny])
def community_list(request):
    communities = _communities().order_by('-created_at')
    return Response(CommunitySerializer(communities, many=True).data)


# 2. 동아리 검색 (이름/설명, 멤버 많은 순 10개)
@api_view(['GET'])
@permission_classes([AllowAny])
def community_search(request):
    query = request.GET.get('q', '').strip()
    if not query:
        return Response([])

    communities = (
        _communities()
        .filter(Q(name__icontains=query) | Q(description__icontains=query))
        .order_by('-member_count', '-created_at')[:SEARCH_LIMIT]
    )
    return Response(CommunitySerializer(communities, many=True).data)


# 3. 동아리 생성 (생성자 = 동아리장)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def community_create(request):
    serializer = CommunityWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return _bad_request(first_error(serializer.errors))

    data = serializer.validated_data
    game = None
    if data.get('gameId'):
        game = Game.objects.filter(igdb_id=data['gameId']).first()

    with transaction.atomic():
        community = Community.objects.create(
            name=data['name'],
            description=data.get('description'),
            image=data.get('image'),
            game=game,
            owner=request.user,
        )
        CommunityMember.objects.create(community=community, user=request.user, role='admin')

    logger.info(f"Community created: {community.name} by {request.user.username}")
    return Response(
        CommunitySerializer(_communities().get(pk=community.pk)).data,
        status=status.HTTP_201_CREATED,
    )


# 4. 동아리 상세
@api_view(['GET'])
@permission_classes([AllowAny])
def community_detail(request, community_id):
    community = get_object_or_404(_communities(), pk=community_id)
    membership = community.get_membership(request.user)

    data = CommunitySerializer(community).data
    data.update({
        'isOwner': community.is_owner(request.user),
        'isMember': membership is not None,
        'myRole': membership.role if membership else None,
    })
    return Response(data)


# 5. 동아리 수정 (동아리장 전용)
@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def community_update(request, community_id):
    community = get_object_or_404(Community, pk=community_id)
    if not community.is_owner(request.user):
        return _forbidden('동아리장만 수정할 수 있습니다.')

    serializer = CommunityWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return _bad_request(first_error(serializer.errors))

    data = serializer.validated_data
    community.name = data['name']
    community.description = data.get('description')
    community.image = data.get('image')
    community.save(update_fields=['name', 'description', 'image', 'updated_at'])
    return Response(CommunitySerializer(_communities().get(pk=community.pk)).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def check_owner(request, community_id):
    community = get_object_or_404(Community, pk=community_id)
    return Response({
        'community': {'id': community.pk, 'ownerId': community.owner_id},
        'isOwner': community.is_owner(request.user),
    })


# 6. 가입 / 탈퇴
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def community_join(request, community_id):
    community = get_object_or_404(Community, pk=community_id)
    if community.members.filter(user=request.user).exists():
        return _bad_request('이미 가입한 동아리입니다.')

    nickname = (request.data.get('nickname') or '').strip() or None
    if nickname:
        conflict = nickname_conflict(community, nickname)
        if conflict:
            return _bad_request(conflict)

    try:
        with transaction.atomic():
            member = CommunityMember.objects.create(
                community=community, user=request.user, role='member', nickname=nickname
            )
    except IntegrityError:
        # 중복 확인 직후 같은 별명으로 먼저 가입한 경우
        return _bad_request('이미 사용 중인 별명입니다.')
    return Response(MemberSerializer(member).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def community_leave(request, community_id):
    community = get_object_or_404(Community, pk=community_id)
    if community.is_owner(request.user):
        return _bad_request('동아리장은 탈퇴할 수 없습니다.')

    membership = community.get_membership(request.user)
    if membership is None:
        return _bad_request('가입하지 않은 동아리입니다.')

    membership.delete()
    return Response({'success': True})


@api_view(['GET'])
@permission_classes([AllowAny])
def check_nickname(request, community_id):
    community = get_object_or_404(Community, pk=community_id)
    nickname = request.GET.get('nickname', '').strip()
    if not nickname:
        return _bad_request('별명을 입력해주세요.')

    conflict = nickname_conflict(community, nickname)
    if conflict:
        return Response({'available': False, 'message': conflict})
    return Response({'available': True, 'message': '사용할 수 있는 별명입니다.'})


# 7. 카테고리 (동아리장 전용 관리)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def category_list_create(request, community_id):
    community = get_object_or_404(Community, pk=community_id)

    if request.method == 'GET':
        return Response(CategorySerializer(community.categories.all(), many=True).data)

    if not community.is_owner(request.user):
        return _forbidden('동아리장만 카테고리를 만들 수 있습니다.')

    name = (request.data.get('name') or '').strip()
    if not name:
        return _bad_request('카테고리 이름을 입력해주세요.')

    category = Category.objects.create(
        community=community, name=name, order=_next_order(community.categories.all())
    )
    return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def category_detail(request, community_id, category_id):
    community = get_object_or_404(Community, pk=community_id)
    if not community.is_owner(request.user):
        return _forbidden('동아리장만 카테고리를 관리할 수 있습니다.')
    category = get_object_or_404(Category, pk=category_id, community=community)

    if request.method == 'DELETE':
        # 소속 게시판은 category 가 null 로 남음
        category.delete()
        return Response({'success': True})

    name = (request.data.get('name') or '').strip()
    if not name:
        return _bad_request('카테고리 이름을 입력해주세요.')
    category.name = name
    category.save(update_fields=['name'])
    return Response(CategorySerializer(category).data)


def _resolve_category(community, category_id):
    """(category, error message)"""
    if not category_id:
        return None, None
    category = community.categories.filter(pk=category_id).first()
    if category is None:
        return None, '잘못된 카테고리입니다.'
    return category, None


# 8. 게시판 (동아리장 전용 관리)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def board_list_create(request, community_id):
    community = get_object_or_404(Community, pk=community_id)

    if request.method == 'GET':
        boards = community.boards.annotate(post_count=Count('posts'))
        return Response(BoardSerializer(boards, many=True).data)

    if not community.is_owner(request.user):
        return _forbidden('동아리장만 게시판을 만들 수 있습니다.')

    serializer = BoardWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return _bad_request(first_error(serializer.errors))
    data = serializer.validated_data

    category, error = _resolve_category(community, data.get('categoryId'))
    if error:
        return _bad_request(error)

    board = Board.objects.create(
        community=community,
        category=category,
        name=data['name'].strip(),
        description=data.get('description'),
        is_notice_board=data['isNoticeBoard'],
        order=_next_order(community.boards.all()),
    )
    return Response(BoardSerializer(board).data, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def board_detail(request, community_id, board_id):
    community = get_object_or_404(Community, pk=community_id)
    if not community.is_owner(request.user):
        return _forbidden('동아리장만 게시판을 관리할 수 있습니다.')
    board = get_object_or_404(Board, pk=board_id, community=community)

    if request.method == 'DELETE':
        # 게시글은 남고 board 만 null
        board.delete()
        return Response({'success': True})

    serializer = BoardWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return _bad_request(first_error(serializer.errors))
    data = serializer.validated_data

    category, error = _resolve_category(community, data.get('categoryId'))
    if error:
        return _bad_request(error)

    board.name = data['name'].strip()
    board.description = data.get('description')
    board.category = category
    board.is_notice_board = data['isNoticeBoard']
    board.save(update_fields=['name', 'description', 'category', 'is_notice_board'])
    return Response(BoardSerializer(board).data)


# 9. 멤버 관리
@api_view(['GET'])
@permission_classes([AllowAny])
def member_list(request, community_id):
    community = get_object_or_404(Community, pk=community_id)
    members = community.members.select_related('user')
    return Response(MemberSerializer(members, many=True).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def member_role(request, community_id, member_id):
    community = get_object_or_404(Community, pk=community_id)
    role = request.data.get('role')
    if role not in CHANGEABLE_ROLES:
        return _bad_request('잘못된 등급입니다.')
    if not community.is_owner(request.user):
        return _forbidden('동아리장만 등급을 변경할 수 있습니다.')

    member = get_object_or_404(CommunityMember, pk=member_id, community=community)
    if member.user_id == community.owner_id:
        return _bad_request('동아리장의 등급은 변경할 수 없습니다.')

    member.role = role
    member.save(update_fields=['role'])
    return Response(MemberSerializer(member).data)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def member_remove(request, community_id, member_id):
    community = get_object_or_404(Community, pk=community_id)
    if not community.is_owner(request.user):
        return _forbidden('동아리장만 멤버를 내보낼 수 있습니다.')

    member = get_object_or_404(CommunityMember, pk=member_id, community=community)
    if member.user_id == community.owner_id:
        return _bad_request('동아리장은 내보낼 수 없습니다.')

    member.delete()
    return Response({'success': True})


def _validate_post(community, user, data):
    """
    게시글 작성/수정 공통 검증

    - 게시판은 같은 동아리 소속이어야 함
    - 공지사항 게시판은 동아리장만
    - 일반 게시판에서 공지 지정은 동아리장만

    Returns:
        (board, is_notice, error Response)
    """
    board = community.boards.filter(pk=data['boardId']).first()
    if board is None:
        return None, False, _bad_request('잘못된 게시판입니다.')

    is_owner = community.is_owner(user)
    if board.is_notice_board and not is_owner:
        return None, False, _forbidden('공지사항 게시판은 동아리장만 글을 쓸 수 있습니다')
    if not board.is_notice_board and data['isNotice'] and not is_owner:
        return None, False, _forbidden('동아리장만 공지글을 작성할 수 있습니다.')

    return board, board.is_notice_board or data['isNotice'], None


# 10. 게시글 목록 (?board=, 공지 먼저 + 최신순)
@api_view(['GET'])
@permission_classes([AllowAny])
def post_list(request, community_id):
    community = get_object_or_404(Community, pk=community_id)
    posts = _posts().filter(community=community)

    board_id = request.GET.get('board')
    if board_id and board_id.isdigit():
        posts = posts.filter(board_id=int(board_id))

    posts = posts.order_by('-is_notice', '-created_at')
    return Response(PostSerializer(posts, many=True).data)


# 11. 게시글 작성 (멤버 전용)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def post_create(request, community_id):
    community = get_object_or_404(Community, pk=community_id)

    serializer = PostWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return _bad_request('제목, 내용, 게시판을 모두 입력해주세요.')
    data = serializer.validated_data

    if community.get_membership(request.user) is None:
        return _forbidden('동아리 멤버만 글을 쓸 수 있습니다.')

    board, is_notice, error = _validate_post(community, request.user, data)
    if error:
        return error

    post = Post.objects.create(
        community=community,
        board=board,
        user=request.user,
        title=data['title'],
        content=data['content'],
        tags=data['tags'],
        is_notice=is_notice,
    )
    return Response(PostSerializer(_posts().get(pk=post.pk)).data, status=status.HTTP_201_CREATED)


# 12. 게시글 상세 (조회수 증가) / 삭제
@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticatedOrReadOnly])
def post_detail(request, community_id, post_id):
    community = get_object_or_404(Community, pk=community_id)
    post = get_object_or_404(Post, pk=post_id, community=community)

    if request.method == 'GET':
        Post.objects.filter(pk=post.pk).update(view_count=F('view_count') + 1)
        post = _posts().prefetch_related('comments__user').get(pk=post.pk)
        return Response(PostDetailSerializer(post, context={'request': request}).data)

    # 작성자, 동아리장, 운영진만 삭제 가능
    if post.user_id != request.user.pk and not community.is_moderator(request.user):
        return _forbidden('게시글을 삭제할 권한이 없습니다.')

    post.delete()
    return Response({'success': True})


# 13. 게시글 수정 (작성자 전용)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def post_edit(request, community_id, post_id):
    community = get_object_or_404(Community, pk=community_id)
    post = get_object_or_404(Post, pk=post_id, community=community)

    serializer = PostWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return _bad_request('제목, 내용, 게시판을 모두 입력해주세요.')
    data = serializer.validated_data

    if post.user_id != request.user.pk:
        return _forbidden('본인이 작성한 글만 수정할 수 있습니다.')

    board, is_notice, error = _validate_post(community, request.user, data)
    if error:
        return error

    post.title = data['title']
    post.content = data['content']
    post.board = board
    post.tags = data['tags']
    post.is_notice = is_notice
    post.save()
    return Response(PostSerializer(_posts().get(pk=post.pk)).data)


# 14. 댓글 목록 / 작성 (멤버 전용)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def comment_list_create(request, community_id, post_id):
    community = get_object_or_404(Community, pk=community_id)
    post = get_object_or_404(Post, pk=post_id, community=community)

    if request.method == 'GET':
        comments = post.comments.select_related('user')
        return Response(CommentSerializer(comments, many=True).data)

    if community.get_membership(request.user) is None:
        return _forbidden('동아리 멤버만 댓글을 쓸 수 있습니다.')

    content = (request.data.get('content') or '').strip()
    if not content:
        return _bad_request('댓글 내용을 입력해주세요.')

    comment = Comment.objects.create(post=post, user=request.user, content=content)
    return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)


# 15. 댓글 삭제 (작성자, 동아리장, 운영진)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def comment_delete(request, community_id, post_id, comment_id):
    community = get_object_or_404(Community, pk=community_id)
    comment = get_object_or_404(Comment, pk=comment_id, post_id=post_id, post__community=community)

    if comment.user_id != request.user.pk and not community.is_moderator(request.user):
        return _forbidden('댓글을 삭제할 권한이 없습니다.')

    comment.delete()
    return Response({'success': True})


# 16. 게시글 좋아요 (Toggle)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def post_like(request, community_id, post_id):
    post = get_object_or_404(Post, pk=post_id, community_id=community_id)
    existing = PostLike.objects.filter(post=post, user=request.user).first()
    if existing is not None:
        existing.delete()
        liked = False
    else:
        PostLike.objects.create(post=post, user=request.user)
        liked = True
    return Response({'isLiked': liked, 'likeCount': post.likes.count()})
