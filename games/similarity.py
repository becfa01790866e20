"""
게임 간 유사도 계산 (Item-Based Collaborative Filtering)

알고리즘:
    1. 리뷰 평점을 -1.0 ~ 1.0 으로 정규화: (rating - 2.5) / 2.5
    2. 게임 벡터 = 해당 게임을 평가한 유저들의 정규화 점수 벡터 (희소 행렬)
    3. 게임 간 코사인 유사도
    4. 정규화 저장: game_a_id < game_b_id
    5. similarity_rank (각 게임 기준 순위 중 작은 값)
"""
import logging

import numpy as np
import pandas as pd
from django.db import transaction
from scipy.sparse import csr_matrix
from sklearn.metrics.pairwise import cosine_similarity

from reviews.models import Review

from .models import GameSimilarity

logger = logging.getLogger(__name__)

MIN_TOTAL_RATINGS = 10


def normalize_rating(rating):
    """0.5 ~ 5.0 → -0.8 ~ 1.0 (2.5 = 0)"""
    return (rating - 2.5) / 2.5


def load_ratings():
    return pd.DataFrame(list(Review.objects.values('user_id', 'game_id', 'rating')))


def compute_similarity_pairs(df, min_ratings=3, top_k=50, min_similarity=0.1):
    """
    Args:
        df: user_id, game_id, rating 컬럼의 DataFrame

    Returns:
        dict: {(game_a_id, game_b_id): {'score': float, 'rank': int}}
    """
    if df.empty:
        return {}

    df = df.copy()
    df['normalized_score'] = df['rating'].apply(normalize_rating)

    game_rating_counts = df.groupby('game_id').size()
    valid_games = game_rating_counts[game_rating_counts >= min_ratings].index.tolist()
    df = df[df['game_id'].isin(valid_games)]

    if df['game_id'].nunique() < 2:
        return {}

    user_cat = df['user_id'].astype('category')
    game_cat = df['game_id'].astype('category')

    # 행: 게임, 열: 유저
    sparse_matrix = csr_matrix(
        (df['normalized_score'].values, (game_cat.cat.codes.values, user_cat.cat.codes.values)),
        shape=(len(game_cat.cat.categories), len(user_cat.cat.categories))
    )
    logger.info(f"Similarity matrix: {sparse_matrix.shape[0]} games x {sparse_matrix.shape[1]} users")

    similarity_matrix = cosine_similarity(sparse_matrix)
    game_ids = game_cat.cat.categories.tolist()

    pair_data = {}
    for i, game_x_id in enumerate(game_ids):
        sim_scores = similarity_matrix[i]
        sorted_indices = np.argsort(sim_scores)[::-1]

        rank = 0
        for j in sorted_indices:
            if i == j:
                continue

            score = sim_scores[j]
            if score < min_similarity:
                break  # 정렬되어 있으므로 이후는 모두 미달

            rank += 1
            if rank > top_k:
                break

            pair_key = GameSimilarity.normalize_game_ids(game_x_id, game_ids[j])
            if pair_key not in pair_data:
                pair_data[pair_key] = {'score': float(score), 'rank': rank}
            else:
                pair_data[pair_key]['rank'] = min(pair_data[pair_key]['rank'], rank)

    return pair_data


@transaction.atomic
def save_similarities(pair_data):
    """기존 유사도를 모두 지우고 새로 저장. (삭제 수, 생성 수) 반환"""
    deleted_count, _ = GameSimilarity.objects.all().delete()
    GameSimilarity.objects.bulk_create([
        GameSimilarity(
            game_a_id=game_a_id,
            game_b_id=game_b_id,
            similarity_score=data['score'],
            similarity_rank=data['rank'],
        )
        for (game_a_id, game_b_id), data in pair_data.items()
    ], batch_size=1000)
    return deleted_count, len(pair_data)
