from functools import lru_cache
from pymongo import MongoClient
from pymongo import ASCENDING
from rankwise.config import settings


@lru_cache()
def get_client() -> MongoClient:
    # connects lazily, on the first operation
    return MongoClient(settings.DATABASE_URL)


def get_db():
    return get_client()[settings.DATABASE_NAME]


# create indexes once at startup
def init_indexes(db=None):
    db = get_db() if db is None else db

    # percentile curves
    # index 1, load a whole curve for one exam category, ordered by score
    db[settings.PERCENTILE_COLLECTION].create_index(
        [("exam_type", ASCENDING), ("score", ASCENDING)],
        name="curve_lookup"
    )

    # tests
    db.tests.create_index("test_id", unique=True)

    # questions
    # index 1, read all questions for specific test
    db.test_questions.create_index([("test_id", ASCENDING)])

    # attempts
    # index 1, evaluation reads and updates a single attempt
    db.test_attempts.create_index("attempt_id", unique=True)

    # responses
    # index 1, read all responses of an attempt
    db.test_responses.create_index(
        [("attempt_id", ASCENDING), ("question_id", ASCENDING)],
        name="attempt_responses"
    )

# pymongo's sync client is used here, the core only needs simple blocking lookups
# and celery tasks are synchronous
