from datetime import timedelta

import pytest
from django.core import mail
from django.utils import timezone

from games.models import Game
from users.models import Follow, Notification, PendingUser, User, VerificationToken

pytestmark = pytest.mark.django_db

SIGNUP_URL = '/api/auth/signup/'
VERIFY_URL = '/api/auth/verify/'
RESEND_URL = '/api/auth/resend-code/'


def signup(api_client, **overrides):
    payload = {'username': 'newbie', 'email': 'newbie@example.com', 'password': 'password123'}
    payload.update(overrides)
    return api_client.post(SIGNUP_URL, payload, format='json')


def test_signup_creates_pending_user_and_sends_code(api_client):
    response = signup(api_client)

    assert response.status_code == 201
    assert response.data['email'] == 'newbie@example.com'

    pending = PendingUser.objects.get(email='newbie@example.com')
    assert pending.username == 'newbie'
    assert pending.password != 'password123'

    token = VerificationToken.objects.get(email='newbie@example.com')
    assert len(token.token) == 6 and token.token.isdigit()
    assert len(mail.outbox) == 1
    assert token.token in mail.outbox[0].body
    assert not User.objects.filter(username='newbie').exists()


@pytest.mark.parametrize('overrides, message', [
    ({'password': ''}, '모든 필드를 입력해주세요.'),
    ({'username': 'ab'}, '아이디는 3-20자 사이여야 합니다.'),
    ({'email': 'not-an-email'}, '올바른 이메일 형식이 아닙니다.'),
    ({'password': 'short'}, '비밀번호는 최소 8자 이상이어야 합니다.'),
])
def test_signup_validation(api_client, overrides, message):
    response = signup(api_client, **overrides)
    assert response.status_code == 400
    assert response.data['detail'] == message


def test_signup_rejects_taken_username_and_email(api_client, make_user):
    make_user('taken', email='taken@example.com')

    response = signup(api_client, username='taken', email='other@example.com')
    assert response.data['detail'] == '이미 사용 중인 아이디입니다.'

    response = signup(api_client, username='fresh', email='taken@example.com')
    assert response.data['detail'] == '이미 가입된 이메일입니다.'


def test_pending_username_blocks_other_email_but_not_same_email(api_client):
    signup(api_client)

    response = signup(api_client, email='someone-else@example.com')
    assert response.status_code == 400
    assert response.data['detail'] == '이미 사용 중인 아이디입니다.'

    # 같은 이메일로 다시 가입하면 이전 대기 정보를 교체
    response = signup(api_client, password='another-password')
    assert response.status_code == 201
    assert PendingUser.objects.filter(email='newbie@example.com').count() == 1
    assert VerificationToken.objects.filter(email='newbie@example.com').count() == 1


def test_verify_creates_user_that_can_log_in(api_client):
    signup(api_client)
    code = VerificationToken.objects.get(email='newbie@example.com').token

    response = api_client.post(VERIFY_URL, {'email': 'newbie@example.com', 'code': code}, format='json')

    assert response.status_code == 200
    assert response.data['message'] == '이메일 인증이 완료되었습니다!'
    user = User.objects.get(username='newbie')
    assert user.email_verified is not None
    assert user.check_password('password123')
    assert not PendingUser.objects.exists()
    assert not VerificationToken.objects.exists()

    token_response = api_client.post(
        '/api/auth/token/', {'username': 'newbie', 'password': 'password123'}, format='json'
    )
    assert token_response.status_code == 200
    assert 'access' in token_response.data


def test_verify_rejects_wrong_and_expired_codes(api_client):
    signup(api_client)
    token = VerificationToken.objects.get(email='newbie@example.com')
    wrong = '000000' if token.token != '000000' else '111111'

    response = api_client.post(VERIFY_URL, {'email': 'newbie@example.com', 'code': wrong}, format='json')
    assert response.status_code == 400
    assert response.data['detail'] == '유효하지 않은 인증 코드입니다.'

    token.expires = timezone.now() - timedelta(minutes=1)
    token.save()
    response = api_client.post(VERIFY_URL, {'email': 'newbie@example.com', 'code': token.token}, format='json')
    assert response.status_code == 400
    assert response.data['detail'] == '인증 코드가 만료되었습니다. 새로운 코드를 요청해주세요.'
    assert not VerificationToken.objects.exists()


def test_verify_when_username_was_taken_meanwhile(api_client, make_user):
    signup(api_client)
    code = VerificationToken.objects.get(email='newbie@example.com').token
    make_user('newbie', email='quick@example.com')

    response = api_client.post(VERIFY_URL, {'email': 'newbie@example.com', 'code': code}, format='json')

    assert response.status_code == 400
    assert response.data['detail'] == '이미 사용 중인 아이디입니다.'
    assert User.objects.filter(username='newbie').count() == 1
    assert PendingUser.objects.filter(email='newbie@example.com').exists()


def test_verify_without_pending_user_returns_404(api_client):
    VerificationToken.objects.create(
        email='ghost@example.com', token='123456', expires=timezone.now() + timedelta(hours=1)
    )
    response = api_client.post(VERIFY_URL, {'email': 'ghost@example.com', 'code': '123456'}, format='json')
    assert response.status_code == 404


def test_resend_code(api_client, make_user):
    signup(api_client)
    old_code = VerificationToken.objects.get(email='newbie@example.com').pk

    response = api_client.post(RESEND_URL, {'email': 'newbie@example.com'}, format='json')
    assert response.status_code == 200
    assert VerificationToken.objects.filter(email='newbie@example.com').count() == 1
    assert VerificationToken.objects.get(email='newbie@example.com').pk != old_code
    assert len(mail.outbox) == 2

    make_user('verified', email='verified@example.com')
    response = api_client.post(RESEND_URL, {'email': 'verified@example.com'}, format='json')
    assert response.status_code == 400
    assert response.data['detail'] == '이미 인증된 계정입니다.'

    response = api_client.post(RESEND_URL, {'email': 'nobody@example.com'}, format='json')
    assert response.status_code == 404


def test_me_requires_login_and_allows_patch(api_client, auth_client, user):
    assert api_client.get('/api/auth/me/').status_code == 401

    response = auth_client.get('/api/auth/me/')
    assert response.status_code == 200
    assert response.data['username'] == user.username
    assert response.data['isAdmin'] is False

    response = auth_client.patch('/api/auth/me/', {'reviewVisibility': 'followers'}, format='json')
    assert response.status_code == 200
    user.refresh_from_db()
    assert user.review_visibility == 'followers'


def test_update_profile(auth_client, user, make_user):
    make_user('occupied')

    response = auth_client.post('/api/user/update-profile/', {'name': '새 이름', 'username': 'Bad Name'}, format='json')
    assert response.status_code == 400

    response = auth_client.post('/api/user/update-profile/', {'name': '새 이름', 'username': 'occupied'}, format='json')
    assert response.data['detail'] == '이미 사용 중인 사용자명입니다'

    response = auth_client.post('/api/user/update-profile/', {'name': ' 새 이름 ', 'username': 'new_name'}, format='json')
    assert response.status_code == 200
    user.refresh_from_db()
    assert (user.name, user.username) == ('새 이름', 'new_name')


def test_update_profile_rejects_pending_username(api_client, auth_client):
    signup(api_client)

    response = auth_client.post('/api/user/update-profile/', {'name': '게이머', 'username': 'newbie'}, format='json')

    assert response.status_code == 400
    assert response.data['detail'] == '이미 사용 중인 사용자명입니다'


def test_update_privacy(auth_client, user):
    response = auth_client.post(
        '/api/user/update-privacy/', {'profileVisibility': 'friends', 'reviewVisibility': 'public'}, format='json'
    )
    assert response.status_code == 400
    assert response.data['detail'] == '잘못된 프로필 공개 범위입니다'

    response = auth_client.post(
        '/api/user/update-privacy/', {'profileVisibility': 'private', 'reviewVisibility': 'followers'}, format='json'
    )
    assert response.status_code == 200
    user.refresh_from_db()
    assert user.profile_visibility == 'private'
    assert user.review_visibility == 'followers'


def test_follow_toggle_creates_notification(auth_client, user, make_user):
    target = make_user('streamer')

    response = auth_client.post('/api/user/follow/', {'targetUserId': target.pk}, format='json')
    assert response.data == {'following': True}
    assert Follow.objects.filter(follower=user, following=target).exists()

    notification = Notification.objects.get(user=target)
    assert notification.type == 'FOLLOW'
    assert notification.actor == user
    assert notification.message == f'{user.name}님이 회원님을 팔로우했습니다'

    response = auth_client.post('/api/user/follow/', {'targetUserId': target.pk}, format='json')
    assert response.data == {'following': False}
    assert not Follow.objects.exists()


def test_cannot_follow_self(auth_client, user):
    response = auth_client.post('/api/user/follow/', {'targetUserId': user.pk}, format='json')
    assert response.status_code == 400


def test_followers_and_following_lists(api_client, make_user):
    alice, bob = make_user('alice'), make_user('bob')
    Follow.objects.create(follower=alice, following=bob)

    response = api_client.get('/api/user/profile/bob/followers/')
    assert [u['username'] for u in response.data['users']] == ['alice']

    response = api_client.get('/api/user/profile/alice/following/')
    assert [u['username'] for u in response.data['users']] == ['bob']


def test_profile_respects_review_visibility(api_client, client_for, make_user, game, rate):
    author = make_user('author', review_visibility='followers')
    fan = make_user('fan')
    stranger = make_user('stranger')
    Follow.objects.create(follower=fan, following=author)
    rate(author, game, 4.0)

    response = client_for(stranger).get('/api/user/profile/author/')
    assert response.data['reviewsHidden'] is True
    assert response.data['reviews'] == []

    response = client_for(fan).get('/api/user/profile/author/')
    assert response.data['reviewsHidden'] is False
    assert len(response.data['reviews']) == 1
    assert response.data['user']['isFollowing'] is True
    assert response.data['user']['followerCount'] == 1


def test_private_profile_only_visible_to_owner(api_client, client_for, make_user):
    hermit = make_user('hermit', profile_visibility='private')

    response = api_client.get('/api/user/profile/hermit/')
    assert response.data['isPrivate'] is True
    assert 'reviewCount' not in response.data['user']

    response = client_for(hermit).get('/api/user/profile/hermit/')
    assert response.data['isPrivate'] is False


def test_notifications_list_and_mark_read(auth_client, user, make_user):
    actor = make_user('actor')
    for _ in range(3):
        Notification.objects.create(user=user, type='FOLLOW', message='hi', actor=actor)

    response = auth_client.get('/api/user/notifications/')
    assert response.data['unreadCount'] == 3
    assert len(response.data['notifications']) == 3

    response = auth_client.post('/api/user/notifications/read/', {}, format='json')
    assert response.data['updated'] == 3
    assert not Notification.objects.filter(is_read=False).exists()


def test_review_count(auth_client, user, make_game, rate):
    rate(user, make_game(), 4.0)
    rate(user, make_game(), 2.0)
    assert auth_client.get('/api/user/review-count/').data == {'count': 2}


def test_delete_account_recalculates_game_stats(auth_client, user, make_user, game, rate):
    other = make_user('other')
    rate(user, game, 1.0)
    rate(other, game, 5.0)

    response = auth_client.delete('/api/user/delete-account/')
    assert response.status_code == 200
    assert not User.objects.filter(pk=user.pk).exists()

    game = Game.objects.get(pk=game.pk)
    assert game.total_reviews == 1
    assert game.average_rating == 5.0


def test_logout_blacklists_refresh_token(api_client, user):
    tokens = api_client.post(
        '/api/auth/token/', {'username': user.username, 'password': 'password123'}, format='json'
    ).data
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

    response = api_client.post('/api/auth/logout/', {'refresh': tokens['refresh']}, format='json')
    assert response.status_code == 200

    response = api_client.post('/api/auth/token/refresh/', {'refresh': tokens['refresh']}, format='json')
    assert response.status_code == 401


class TestAdminApi:
    @pytest.fixture
    def admin_client(self, client_for, make_user):
        return client_for(make_user('boss', email='admin@gampfire.com'))

    def test_non_admin_is_forbidden(self, auth_client):
        assert auth_client.get('/api/admin/users/').status_code == 403

    def test_list_users_with_search(self, admin_client, make_user):
        make_user('speedrunner')
        response = admin_client.get('/api/admin/users/', {'search': 'speed'})
        assert response.status_code == 200
        assert [u['username'] for u in response.data['users']] == ['speedrunner']
        assert response.data['users'][0]['reviewCount'] == 0

    def test_update_role(self, admin_client, user):
        response = admin_client.post('/api/admin/users/update-role/', {'userId': user.pk, 'role': 'admin'}, format='json')
        assert response.status_code == 400

        response = admin_client.post('/api/admin/users/update-role/', {'userId': user.pk, 'role': 'expert'}, format='json')
        assert response.status_code == 200
        user.refresh_from_db()
        assert user.role == 'expert'

    def test_update_username(self, admin_client, user, make_user):
        make_user('dupe')
        response = admin_client.post(
            '/api/admin/users/update-username/', {'userId': user.pk, 'username': 'dupe'}, format='json'
        )
        assert response.status_code == 400

        response = admin_client.post(
            '/api/admin/users/update-username/', {'userId': user.pk, 'username': 'renamed'}, format='json'
        )
        assert response.status_code == 200
        user.refresh_from_db()
        assert user.username == 'renamed'

    def test_update_username_rejects_pending_username(self, admin_client, api_client, user):
        signup(api_client)
        response = admin_client.post(
            '/api/admin/users/update-username/', {'userId': user.pk, 'username': 'newbie'}, format='json'
        )
        assert response.status_code == 400
        assert response.data['detail'] == '이미 사용 중인 아이디입니다.'

    def test_delete_user_but_not_self(self, admin_client, user):
        boss = User.objects.get(username='boss')
        response = admin_client.delete('/api/admin/users/delete/', {'userId': boss.pk}, format='json')
        assert response.status_code == 400

        response = admin_client.delete('/api/admin/users/delete/', {'userId': user.pk}, format='json')
        assert response.status_code == 200
        assert not User.objects.filter(pk=user.pk).exists()

    def test_delete_any_review(self, admin_client, user, game, rate):
        review = rate(user, game, 3.0)
        assert len(admin_client.get('/api/admin/reviews/').data['reviews']) == 1

        response = admin_client.delete('/api/admin/reviews/delete/', {'reviewId': review.pk}, format='json')
        assert response.status_code == 200
        game.refresh_from_db()
        assert game.total_reviews == 0
