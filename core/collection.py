"""
Collection Bootstrap Module

Ensures the Rekognition face collection exists. Creating a collection that
already exists is treated as success, so running the bootstrap twice is safe.
Faces are indexed into the collection by a separate enrollment process.

Usage:
    from core.collection import ensure_collection
    status = ensure_collection(client, "AauaStaffCollection")
"""

import logging
from enum import Enum
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.rekognition import classify_error, error_code

# Setup logging
logger = logging.getLogger(__name__)

ALREADY_EXISTS_CODE = "ResourceAlreadyExistsException"


class CollectionStatus(Enum):
    """Outcome of ensure_collection."""
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


def ensure_collection(client: Any, collection_id: str) -> CollectionStatus:
    """
    Create the collection, tolerating "already exists".

    A single attempt is made; there is no retry.

    Args:
        client: boto3 Rekognition client.
        collection_id: Name of the collection to create.

    Returns:
        CollectionStatus.CREATED or CollectionStatus.ALREADY_EXISTS.

    Raises:
        RecognitionError: For any other service or transport failure.
    """
    try:
        response = client.create_collection(CollectionId=collection_id)
    except ClientError as e:
        if error_code(e) == ALREADY_EXISTS_CODE:
            logger.info(f"Collection already exists: {collection_id}")
            return CollectionStatus.ALREADY_EXISTS
        raise classify_error(e) from e
    except BotoCoreError as e:
        raise classify_error(e) from e

    logger.info(
        f"Collection created: {collection_id} "
        f"(arn={response.get('CollectionArn')}, "
        f"face_model_version={response.get('FaceModelVersion')})"
    )
    return CollectionStatus.CREATED
