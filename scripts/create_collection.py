#!/usr/bin/env python
"""
One-shot Collection Bootstrap

Creates the Rekognition face collection used by POST /authenticate.
Safe to run more than once: an existing collection counts as success.
Any other failure is logged and the script exits with status 1; nothing
is retried.

Usage:
    # Uses rekognition.collection_id / region from config.yaml and AWS_* env
    python scripts/create_collection.py

    # Override collection or region
    python scripts/create_collection.py --collection-id AauaStaffCollection --region eu-west-1
"""

import argparse
import dataclasses
import logging
import os
import sys
from typing import List, Optional

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.collection import CollectionStatus, ensure_collection
from core.config import get_rekognition_settings
from core.rekognition import RecognitionError, create_rekognition_client

logger = logging.getLogger("create_collection")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create the Rekognition face collection (idempotent)."
    )
    parser.add_argument(
        "--collection-id",
        default=None,
        help="Collection name (default: rekognition.collection_id from config.yaml)",
    )
    parser.add_argument(
        "--region",
        default=None,
        help="AWS region (default: AWS_REGION or rekognition.region)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, client=None) -> int:
    """
    Run the bootstrap.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).
        client: Optional pre-built Rekognition client.

    Returns:
        Process exit code: 0 when the collection exists afterwards, 1 otherwise.
    """
    args = parse_args(argv)

    settings = get_rekognition_settings()
    overrides = {}
    if args.collection_id:
        overrides["collection_id"] = args.collection_id
    if args.region:
        overrides["region"] = args.region
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    if client is None:
        client = create_rekognition_client(settings)

    logger.info(f"Ensuring collection {settings.collection_id} in {settings.region}")
    try:
        status = ensure_collection(client, settings.collection_id)
    except RecognitionError as e:
        logger.error(f"Failed to create collection [{e.kind.value}] code={e.code}: {e}")
        return 1

    if status is CollectionStatus.CREATED:
        logger.info("Collection created.")
    else:
        logger.info("Collection already exists.")
    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    sys.exit(main())
