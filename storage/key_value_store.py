"""Persistent key-value stores backing the cached calendar tier."""
import json
import logging
import os
import time
from typing import Dict, Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Interface for string-valued persistent storage."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class DynamoDBKeyValueStore(KeyValueStore):
    """Key-value store kept in a DynamoDB table keyed by 'cache_key'."""

    def __init__(self, table_name: str):
        """
        Initialize DynamoDB client and table reference.

        Args:
            table_name: Name of the DynamoDB table
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)
        logger.info(f"Initialized DynamoDBKeyValueStore for table: {table_name}")

    def get(self, key: str) -> Optional[str]:
        """
        Read a value from the table.

        Args:
            key: Cache key

        Returns:
            Stored string, or None if the key was never written

        Raises:
            ClientError: If the read fails
        """
        try:
            response = self.table.get_item(Key={'cache_key': key})
        except ClientError as e:
            logger.error(f"Error reading '{key}' from DynamoDB: {e}")
            raise

        item = response.get('Item')
        if not item:
            return None
        value = item.get('value')
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            self.table.put_item(Item={
                'cache_key': key,
                'value': value,
                'updated_at': int(time.time())
            })
        except ClientError as e:
            logger.error(f"Error writing '{key}' to DynamoDB: {e}")
            raise

    def remove(self, key: str) -> None:
        try:
            self.table.delete_item(Key={'cache_key': key})
        except ClientError as e:
            logger.error(f"Error deleting '{key}' from DynamoDB: {e}")
            raise


class JsonFileStore(KeyValueStore):
    """Key-value store persisted as a single JSON object on local disk."""

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable store file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)
