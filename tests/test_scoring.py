import pytest

from pairs_app.services import scoring
from pairs_app.services.game_engine import Player


def test_no_attempts_gives_base_index():
    assert scoring.performance_index(0, 0, 0.0) == scoring.BASE_INDEX


def test_zero_guards_do_not_raise():
    # aucune paire trouvée mais du temps écoulé : pas de division par zéro
    assert scoring.time_penalty(12.0, 0, 0) == 0
    assert scoring.accuracy_bonus(3, 0) == 0
    assert scoring.performance_index(0, 1, 30.0) == scoring.BASE_INDEX


def test_perfect_game_is_clamped_to_upper_bound():
    # 8 paires en 8 tentatives : 80 + 16 + 40 = 136 ; 18 paires dépassent 150
    assert scoring.performance_index(8, 16, 0.0) == 136
    assert scoring.performance_index(18, 36, 0.0) == scoring.INDEX_MAX


def test_many_errors_are_clamped_to_lower_bound():
    assert scoring.performance_index(0, 40, 0.0) == scoring.INDEX_MIN


def test_index_increases_with_accuracy():
    low = scoring.performance_index(2, 16, 10.0)
    high = scoring.performance_index(6, 16, 10.0)
    assert high > low


def test_index_decreases_with_time_and_errors():
    fast = scoring.performance_index(4, 12, 4.0)
    slow = scoring.performance_index(4, 12, 40.0)
    assert slow < fast
    assert scoring.performance_index(4, 12, 4.0, error_count=5) < fast


def test_explicit_error_count_overrides_derived():
    # 4 tentatives de paire, 4 réussites : 0 erreur déduite
    assert scoring.performance_index(4, 8, 0.0) == 80 + 8 + 40
    assert scoring.performance_index(4, 8, 0.0, error_count=2) == 80 + 8 + 40 - 6


@pytest.mark.parametrize("correct,total,elapsed", [(0, 0, 0.0), (1, 30, 500.0), (18, 36, 0.1), (3, 7, 12.5)])
def test_index_always_within_bounds(correct, total, elapsed):
    value = scoring.performance_index(correct, total, elapsed)
    assert scoring.INDEX_MIN <= value <= scoring.INDEX_MAX


def test_ranking_by_score_then_pairs():
    players = [
        Player(id=1, name="A", score=2, pairs_found=2),
        Player(id=2, name="B", score=3, pairs_found=3),
        Player(id=3, name="C", score=2, pairs_found=3),
        Player(id=4, name="D", score=3, pairs_found=3),
    ]

    results = scoring.ranked_results(players)

    assert [r["player_id"] for r in results] == [2, 4, 3, 1]
    assert [r["rank"] for r in results] == [1, 1, 3, 4]
    assert scoring.winners(results) == [2, 4]


def test_ranked_result_uses_player_errors():
    player = Player(id=1, name="A", score=1, pairs_found=1, total_attempts=6, correct_attempts=1, errors=2)
    player.response_times.append(4.0)

    result = scoring.ranked_results([player])[0]

    # 80 + (2 + 40/3) - (0.5*4 + 3*2) = 87.33 → 87
    assert result["performance_index"] == 87
    assert result["elapsed_seconds"] == 4.0
