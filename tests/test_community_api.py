from unittest.mock import patch

import pytest
from django.db import IntegrityError, transaction

from community.models import Board, Comment, Community, CommunityMember, Post

pytestmark = pytest.mark.django_db

BASE = '/api/communities'


@pytest.fixture
def owner(make_user):
    return make_user('leader', name='리더')


@pytest.fixture
def community(owner, client_for):
    response = client_for(owner).post(f'{BASE}/create/', {'name': '소울라이크 동호회', 'description': '죽어도 다시'}, format='json')
    return Community.objects.get(pk=response.data['id'])


@pytest.fixture
def member(make_user, community):
    u = make_user('newbie')
    CommunityMember.objects.create(community=community, user=u, role='member')
    return u


@pytest.fixture
def board(community):
    return Board.objects.create(community=community, name='자유게시판')


@pytest.fixture
def notice_board(community):
    return Board.objects.create(community=community, name='공지사항', is_notice_board=True, order=1)


class TestCommunity:
    def test_create_makes_owner_admin_member(self, owner, client_for, game):
        response = client_for(owner).post(
            f'{BASE}/create/', {'name': '엘든링 길드', 'gameId': game.igdb_id}, format='json'
        )

        assert response.status_code == 201
        assert response.data['gameId'] == game.igdb_id
        assert response.data['memberCount'] == 1
        assert response.data['owner']['username'] == 'leader'
        assert CommunityMember.objects.get(community_id=response.data['id']).role == 'admin'

    def test_create_requires_name(self, auth_client):
        response = auth_client.post(f'{BASE}/create/', {'name': ''}, format='json')
        assert response.status_code == 400
        assert response.data['detail'] == '이름을 입력해주세요.'

    def test_detail_for_member_and_guest(self, api_client, client_for, community, member):
        response = client_for(member).get(f'{BASE}/{community.pk}/')
        assert response.data['isMember'] is True
        assert response.data['isOwner'] is False
        assert response.data['myRole'] == 'member'
        assert response.data['memberCount'] == 2

        response = api_client.get(f'{BASE}/{community.pk}/')
        assert (response.data['isMember'], response.data['myRole']) == (False, None)

    def test_search_orders_by_members(self, api_client, make_user, client_for, community, member):
        client_for(make_user('other')).post(f'{BASE}/create/', {'name': '소울 클럽'}, format='json')

        response = api_client.get(f'{BASE}/search/', {'q': '소울'})
        assert [c['name'] for c in response.data] == ['소울라이크 동호회', '소울 클럽']
        assert api_client.get(f'{BASE}/search/', {'q': ' '}).data == []

    def test_update_only_owner(self, client_for, owner, member, community):
        payload = {'name': '새 이름', 'description': None}
        assert client_for(member).put(f'{BASE}/{community.pk}/update/', payload, format='json').status_code == 403

        response = client_for(owner).put(f'{BASE}/{community.pk}/update/', payload, format='json')
        assert response.data['name'] == '새 이름'

    def test_check_owner(self, client_for, owner, community):
        response = client_for(owner).get(f'{BASE}/{community.pk}/check-owner/')
        assert response.data == {'community': {'id': community.pk, 'ownerId': owner.pk}, 'isOwner': True}


class TestMembership:
    def test_join_and_leave(self, auth_client, community):
        response = auth_client.post(f'{BASE}/{community.pk}/join/', {'nickname': '방랑자'}, format='json')
        assert response.status_code == 201
        assert response.data['nickname'] == '방랑자'

        assert auth_client.post(f'{BASE}/{community.pk}/join/').status_code == 400

        assert auth_client.post(f'{BASE}/{community.pk}/leave/').data == {'success': True}
        assert auth_client.post(f'{BASE}/{community.pk}/leave/').status_code == 400

    def test_owner_cannot_leave(self, client_for, owner, community):
        response = client_for(owner).post(f'{BASE}/{community.pk}/leave/')
        assert response.status_code == 400

    def test_nickname_conflicts(self, auth_client, api_client, community, member):
        CommunityMember.objects.filter(user=member).update(nickname='고인물')

        response = auth_client.post(f'{BASE}/{community.pk}/join/', {'nickname': '고인물'}, format='json')
        assert response.data['detail'] == '이미 사용 중인 별명입니다.'

        # 다른 멤버의 이름(name)과도 겹치면 안 됨
        response = api_client.get(f'{BASE}/{community.pk}/check-nickname/', {'nickname': '리더'})
        assert response.data == {'available': False, 'message': '이미 사용 중인 이름입니다.'}

        response = api_client.get(f'{BASE}/{community.pk}/check-nickname/', {'nickname': '뉴비'})
        assert response.data['available'] is True

    def test_role_change_and_removal(self, client_for, owner, member, community):
        owner_client = client_for(owner)
        membership = CommunityMember.objects.get(user=member)
        owner_membership = CommunityMember.objects.get(user=owner)
        url = f'{BASE}/{community.pk}/members'

        assert owner_client.put(f'{url}/{membership.pk}/role/', {'role': 'admin'}, format='json').status_code == 400
        assert client_for(member).put(
            f'{url}/{membership.pk}/role/', {'role': 'moderator'}, format='json'
        ).status_code == 403
        assert owner_client.put(
            f'{url}/{owner_membership.pk}/role/', {'role': 'member'}, format='json'
        ).status_code == 400

        response = owner_client.put(f'{url}/{membership.pk}/role/', {'role': 'moderator'}, format='json')
        assert response.data['role'] == 'moderator'

        assert owner_client.delete(f'{url}/{owner_membership.pk}/').status_code == 400
        assert owner_client.delete(f'{url}/{membership.pk}/').data == {'success': True}
        assert not CommunityMember.objects.filter(user=member).exists()


class TestBoards:
    def test_categories(self, client_for, owner, member, community):
        url = f'{BASE}/{community.pk}/categories/'
        assert client_for(member).post(url, {'name': '잡담'}, format='json').status_code == 403

        first = client_for(owner).post(url, {'name': '정보'}, format='json')
        second = client_for(owner).post(url, {'name': '잡담'}, format='json')
        assert (first.data['order'], second.data['order']) == (0, 1)

        response = client_for(owner).patch(f'{url}{first.data["id"]}/', {'name': '공략'}, format='json')
        assert response.data['name'] == '공략'

    def test_board_crud_and_category_delete(self, client_for, owner, community):
        owner_client = client_for(owner)
        category = owner_client.post(f'{BASE}/{community.pk}/categories/', {'name': '정보'}, format='json').data

        response = owner_client.post(f'{BASE}/{community.pk}/boards/', {
            'name': '공략', 'categoryId': category['id'],
        }, format='json')
        assert response.status_code == 201
        assert response.data['categoryId'] == category['id']
        assert response.data['isNoticeBoard'] is False

        bad = owner_client.post(f'{BASE}/{community.pk}/boards/', {'name': 'x', 'categoryId': 9999}, format='json')
        assert bad.status_code == 400

        owner_client.delete(f'{BASE}/{community.pk}/categories/{category["id"]}/')
        assert Board.objects.get(pk=response.data['id']).category is None

        listed = owner_client.get(f'{BASE}/{community.pk}/boards/')
        assert listed.data[0]['postCount'] == 0

    def test_deleting_board_keeps_posts(self, client_for, owner, community, board):
        post = Post.objects.create(community=community, board=board, user=owner, title='t', content='c')
        client_for(owner).delete(f'{BASE}/{community.pk}/boards/{board.pk}/')

        post.refresh_from_db()
        assert post.board is None


class TestPosts:
    def test_member_can_post(self, client_for, member, community, board):
        response = client_for(member).post(f'{BASE}/{community.pk}/posts/create/', {
            'title': '첫 글', 'content': '안녕하세요', 'boardId': board.pk, 'tags': ['인사'],
        }, format='json')

        assert response.status_code == 201
        assert response.data['board'] == {'id': board.pk, 'name': '자유게시판'}
        assert response.data['isNotice'] is False

    def test_outsider_and_missing_fields(self, auth_client, client_for, member, community, board):
        payload = {'title': '글', 'content': '내용', 'boardId': board.pk}
        assert auth_client.post(f'{BASE}/{community.pk}/posts/create/', payload, format='json').status_code == 403

        response = client_for(member).post(f'{BASE}/{community.pk}/posts/create/', {'title': '글'}, format='json')
        assert response.status_code == 400
        assert response.data['detail'] == '제목, 내용, 게시판을 모두 입력해주세요.'

    def test_notice_rules(self, client_for, owner, member, community, board, notice_board):
        url = f'{BASE}/{community.pk}/posts/create/'
        member_client = client_for(member)

        response = member_client.post(url, {'title': 'a', 'content': 'b', 'boardId': notice_board.pk}, format='json')
        assert response.status_code == 403
        assert response.data['detail'] == '공지사항 게시판은 동아리장만 글을 쓸 수 있습니다'

        response = member_client.post(url, {'title': 'a', 'content': 'b', 'boardId': board.pk, 'isNotice': True}, format='json')
        assert response.status_code == 403

        # 공지 게시판 글은 자동으로 공지
        response = client_for(owner).post(url, {'title': '규칙', 'content': 'b', 'boardId': notice_board.pk}, format='json')
        assert response.data['isNotice'] is True

    def test_list_puts_notices_first_and_filters_board(self, api_client, owner, community, board, notice_board):
        Post.objects.create(community=community, board=notice_board, user=owner, title='공지', content='c', is_notice=True)
        Post.objects.create(community=community, board=board, user=owner, title='잡담', content='c')

        response = api_client.get(f'{BASE}/{community.pk}/posts/')
        assert [p['title'] for p in response.data] == ['공지', '잡담']

        response = api_client.get(f'{BASE}/{community.pk}/posts/', {'board': board.pk})
        assert [p['title'] for p in response.data] == ['잡담']

    def test_detail_counts_views(self, api_client, owner, community, board):
        post = Post.objects.create(community=community, board=board, user=owner, title='t', content='c')
        Comment.objects.create(post=post, user=owner, content='첫 댓글')

        api_client.get(f'{BASE}/{community.pk}/posts/{post.pk}/')
        response = api_client.get(f'{BASE}/{community.pk}/posts/{post.pk}/')

        assert response.data['viewCount'] == 2
        assert response.data['commentCount'] == 1
        assert response.data['comments'][0]['content'] == '첫 댓글'
        assert response.data['isLiked'] is False

    def test_edit_only_author(self, client_for, owner, member, community, board):
        post = Post.objects.create(community=community, board=board, user=member, title='t', content='c')
        url = f'{BASE}/{community.pk}/posts/{post.pk}/edit/'
        payload = {'title': '수정', 'content': '수정됨', 'boardId': board.pk}

        assert client_for(owner).patch(url, payload, format='json').status_code == 403
        response = client_for(member).patch(url, payload, format='json')
        assert response.data['title'] == '수정'

    def test_delete_by_author_or_moderator(self, client_for, make_user, owner, member, community, board):
        outsider = make_user('outsider')
        first = Post.objects.create(community=community, board=board, user=member, title='1', content='c')
        second = Post.objects.create(community=community, board=board, user=member, title='2', content='c')

        assert client_for(outsider).delete(f'{BASE}/{community.pk}/posts/{first.pk}/').status_code == 403
        assert client_for(member).delete(f'{BASE}/{community.pk}/posts/{first.pk}/').status_code == 200
        assert client_for(owner).delete(f'{BASE}/{community.pk}/posts/{second.pk}/').status_code == 200
        assert not Post.objects.exists()


class TestCommentsAndLikes:
    @pytest.fixture
    def post(self, owner, community, board):
        return Post.objects.create(community=community, board=board, user=owner, title='t', content='c')

    def test_comment_flow(self, client_for, auth_client, owner, member, community, post):
        url = f'{BASE}/{community.pk}/posts/{post.pk}/comments/'
        assert auth_client.post(url, {'content': '외부인'}, format='json').status_code == 403
        assert client_for(member).post(url, {'content': '  '}, format='json').status_code == 400

        created = client_for(member).post(url, {'content': '좋은 글'}, format='json')
        assert created.status_code == 201
        assert created.data['user']['username'] == 'newbie'

        comment_url = f'{url}{created.data["id"]}/'
        assert auth_client.delete(comment_url).status_code == 403
        assert client_for(owner).delete(comment_url).data == {'success': True}

    def test_like_toggle(self, auth_client, community, post):
        url = f'{BASE}/{community.pk}/posts/{post.pk}/like/'
        assert auth_client.post(url).data == {'isLiked': True, 'likeCount': 1}
        assert auth_client.post(url).data == {'isLiked': False, 'likeCount': 0}


class TestNicknameConstraint:
    def test_database_rejects_duplicate_nickname(self, make_user, community):
        CommunityMember.objects.create(community=community, user=make_user('first'), nickname='고인물')

        with pytest.raises(IntegrityError), transaction.atomic():
            CommunityMember.objects.create(community=community, user=make_user('second'), nickname='고인물')

    def test_members_without_nickname_are_allowed(self, make_user, community):
        CommunityMember.objects.create(community=community, user=make_user('a'))
        CommunityMember.objects.create(community=community, user=make_user('b'))
        assert community.members.filter(nickname__isnull=True).count() == 2

    def test_join_race_returns_bad_request(self, auth_client, make_user, community):
        CommunityMember.objects.create(community=community, user=make_user('fast'), nickname='고인물')
        with patch('community.views.nickname_conflict', return_value=None):
            response = auth_client.post(f'{BASE}/{community.pk}/join/', {'nickname': '고인물'}, format='json')

        assert response.status_code == 400
        assert response.data['detail'] == '이미 사용 중인 별명입니다.'
