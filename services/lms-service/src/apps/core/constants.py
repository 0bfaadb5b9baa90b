"""
LMS Service Constants.
"""

# Metrics
METRIC_COUNT = 'count'
METRIC_SCORE = 'score'
METRIC_DURATION = 'duration'

# Timeframe
TIMEFRAME_ALL_TIME = 'all_time'

# Realtime
REALTIME_CHANNEL_PREFIX = 'user-'

# Cache
LEADERBOARD_CACHE_KEY = 'leaderboard:{id}:standings'

# Leaderboard scope to achievement type
LEADERBOARD_ACHIEVEMENT_TYPES = {
    'course': 'course_progress',
    'quiz': 'quiz_score',
    'streak': 'streak',
}

# Leaderboard scope to point type
LEADERBOARD_POINT_TYPES = {
    'lesson': 'lesson_complete',
    'quiz': 'quiz_score',
    'assignment': 'assignment_submit',
}
