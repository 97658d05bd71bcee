"""
Built-in starter data, inserted once into an empty database.
"""
import logging
from typing import Any, Dict, List

from prompt_library.core.exceptions import SeedDataException
from prompt_library.core.logging import log_operation_error
from prompt_library.database.session import Database
from prompt_library.repositories import prompt_db_repository, upload_history_db_repository
from prompt_library.utils.tags import serialize_tags

logger = logging.getLogger(__name__)


SEED_PROMPTS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "title": "Creative Writing Assistant",
        "description": "AI prompt for creative writing assistance",
        "content": (
            "You are a creative writing assistant. Help the user develop their story ideas, "
            "characters, and plot points. Provide constructive feedback and suggestions."
        ),
        "tags": ["writing", "creative", "story"],
        "created": "2023-01-01T12:00:00.000Z",
        "is_active": True,
    },
    {
        "id": "2",
        "title": "Code Review Expert",
        "description": "AI prompt for code review assistance",
        "content": (
            "You are a code review expert. Review the provided code for best practices, "
            "potential bugs, and performance issues. Suggest improvements and explain your reasoning."
        ),
        "tags": ["coding", "review", "programming"],
        "created": "2023-01-02T12:00:00.000Z",
        "is_active": True,
    },
    {
        "id": "3",
        "title": "Study Guide Creator",
        "description": "AI prompt for creating study guides",
        "content": (
            "You are a study guide creator. Help students create comprehensive study guides "
            "for their subjects. Break down complex topics and provide examples."
        ),
        "tags": ["education", "study", "learning"],
        "created": "2023-01-03T12:00:00.000Z",
        "is_active": False,
    },
]

SEED_HISTORY: List[Dict[str, Any]] = [
    {
        "id": "1",
        "file_name": "writing_prompts.txt",
        "upload_date": "2023-01-01T12:00:00.000Z",
        "status": "success",
        "is_active": True,
        "prompt_count": 1,
    },
    {
        "id": "2",
        "file_name": "coding_prompts.txt",
        "upload_date": "2023-01-02T12:00:00.000Z",
        "status": "success",
        "is_active": True,
        "prompt_count": 1,
    },
    {
        "id": "3",
        "file_name": "study_prompts.txt",
        "upload_date": "2023-01-03T12:00:00.000Z",
        "status": "success",
        "is_active": False,
        "prompt_count": 1,
    },
]


async def seed_if_empty(database: Database) -> int:
    """
    Insert the built-in prompts and history when the prompts table is empty.

    The emptiness check and all inserts share one transaction.

    Args:
        database: Open database with the schema already ensured

    Returns:
        Number of prompts inserted (0 if the database already had prompts)

    Raises:
        SeedDataException: If any insert fails; no seed rows are kept
    """
    try:
        async with database.transaction() as session:
            existing = await prompt_db_repository.count(session)
            if existing:
                logger.info(f"Database already contains {existing} prompts, skipping seed")
                return 0

            for prompt in SEED_PROMPTS:
                await prompt_db_repository.create(
                    session,
                    id=prompt["id"],
                    title=prompt["title"],
                    description=prompt["description"],
                    content=prompt["content"],
                    tags=serialize_tags(prompt["tags"]),
                    created=prompt["created"],
                    last_modified=prompt["created"],
                    is_active=prompt["is_active"],
                    history_id=None,
                    rating=0,
                    rating_count=0,
                    is_favorite=False,
                )

            for entry in SEED_HISTORY:
                await upload_history_db_repository.create(session, **entry)
    except Exception as e:
        log_operation_error(
            logger=__name__,
            function="seed_if_empty",
            operation="seed_if_empty",
            error=e,
            message="Seeding rolled back",
        )
        raise SeedDataException(str(e)) from e

    logger.info(f"Seeded {len(SEED_PROMPTS)} prompts and {len(SEED_HISTORY)} upload history entries")
    return len(SEED_PROMPTS)
