"""
PointsPolicy: deterministic CSAT score -> loyalty points mapping.
"""

# Points per tier
POINTS_COMPENSATION = 10  # score <= 2
POINTS_NEUTRAL = 5        # score == 3
POINTS_REWARD = 15        # score >= 4


def calculate_points(score: int) -> int:
    """
    Points to award for a CSAT score.

    Low scores get more than neutral ones as compensation, high scores are
    rewarded. Range checking (1-5) is the caller's job.
    """
    if score <= 2:
        return POINTS_COMPENSATION
    elif score >= 4:
        return POINTS_REWARD
    else:
        return POINTS_NEUTRAL
