"""
Data Generation Module
"""
from .generators import BlogGenerator, DataGenerator, EngagementGenerator, UserGenerator

__all__ = [
    "DataGenerator",
    "UserGenerator",
    "BlogGenerator",
    "EngagementGenerator",
]
