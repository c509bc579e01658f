"""
BlogHub Admin API

Back-office service for the BlogHub blogging platform: analytics dashboards,
leaderboards, user and content moderation.
"""

__version__ = "1.0.0"
