"""
Initialize database tables and optionally print a development access token
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from jobboard.auth.service import create_user_token
from jobboard.core.database import init_db
from jobboard.core.logging_config import configure_logging
import structlog

logger = structlog.get_logger()


def main():
    """Main initialization function"""
    configure_logging()
    logger.info("initializing_database")

    init_db()
    logger.info("database_initialization_complete")

    # Users live in the account service; a token for a given id is enough to call the API
    if len(sys.argv) > 1:
        user_id = int(sys.argv[1])
        print(f"Access token for user {user_id}:")
        print(create_user_token(user_id))


if __name__ == "__main__":
    main()
