import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Engine configuration settings"""
    
    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///fantasy.db')
    
    # Logging settings
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    
    # Contest rule defaults (used when a contest's rules omit a field)
    DEFAULT_TEAM_SIZE = int(os.getenv('DEFAULT_TEAM_SIZE', 7))
    DEFAULT_WALLET_SIZE = float(os.getenv('DEFAULT_WALLET_SIZE', 100000))
    DEFAULT_MAX_PLAYERS_TO_CHANGE = int(os.getenv('DEFAULT_MAX_PLAYERS_TO_CHANGE', 2))
    DEFAULT_CHANGE_FREQUENCY = os.getenv('DEFAULT_CHANGE_FREQUENCY', 'daily')
    
    # Share of collected entry fees that goes into the prize pool
    PRIZE_POOL_PERCENTAGE = float(os.getenv('PRIZE_POOL_PERCENTAGE', 77.64))
    
    # Team point accumulator settings
    AGGREGATOR_MAX_RETRIES = int(os.getenv('AGGREGATOR_MAX_RETRIES', 3))
    
    # Leaderboard settings
    LEADERBOARD_CACHE_TTL = int(os.getenv('LEADERBOARD_CACHE_TTL', 30))  # seconds
    LEADERBOARD_MAX_PAGE_SIZE = int(os.getenv('LEADERBOARD_MAX_PAGE_SIZE', 100))
    
    @classmethod
    def get_async_database_url(cls) -> str:
        """Return DATABASE_URL with an async driver"""
        database_url = cls.DATABASE_URL
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')
        return database_url
    
    @classmethod
    def validate(cls):
        """Validate that configuration values are usable"""
        if not cls.DATABASE_URL:
            raise ValueError("DATABASE_URL is required")
        if cls.DEFAULT_TEAM_SIZE < 2:
            raise ValueError("DEFAULT_TEAM_SIZE must allow a captain and a vice-captain")
        if not 0 < cls.PRIZE_POOL_PERCENTAGE <= 100:
            raise ValueError("PRIZE_POOL_PERCENTAGE must be in (0, 100]")
        if cls.AGGREGATOR_MAX_RETRIES < 1:
            raise ValueError("AGGREGATOR_MAX_RETRIES must be at least 1")
