"""AWS Lambda handler for the ABT Calendar cache."""
import asyncio
import json
import logging
import os
import time
from typing import Dict, Any, List, Optional

from processor.models import EventRecord
from scraper.settings import AcquisitionSettings
from service.calendar_service import CalendarService
from storage.cache_store import CacheStore
from storage.key_value_store import DynamoDBKeyValueStore, JsonFileStore, KeyValueStore

# Kept across warm invocations so the memory tier survives between calls
_service: Optional[CalendarService] = None


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def build_store() -> KeyValueStore:
    """Pick the persistent store: a local JSON file if CACHE_FILE is set, else DynamoDB."""
    cache_file = os.environ.get('CACHE_FILE')
    if cache_file:
        return JsonFileStore(cache_file)
    return DynamoDBKeyValueStore(table_name=os.environ.get('TABLE_NAME', 'abt-calendar-cache'))


def get_service() -> CalendarService:
    global _service
    if _service is None:
        settings = AcquisitionSettings.from_env()
        _service = CalendarService(CacheStore(build_store()), settings=settings)
    return _service


def reset_service() -> None:
    """Forget the module-level service (used between tests)."""
    global _service
    if _service is not None:
        _service.reset()
    _service = None


async def _dispatch(service: CalendarService, action: str) -> List[EventRecord]:
    if action == 'refresh':
        return await service.get_events(force_refresh=True)
    if action == 'get':
        return await service.get_events(force_refresh=False)
    if action == 'cached':
        return await service.get_cached_events()
    if action == 'clear':
        await service.clear_cache()
        return []
    if action == 'scrape':
        return await service.scrape()
    raise ValueError(f"Unknown action: {action}")


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for the ABT Calendar cache.

    Args:
        event: Payload with an optional 'action' of refresh (default), get,
            cached, clear or scrape. Scheduled EventBridge events carry no
            action and refresh the cache; 'clear' is sent when the client
            app goes to the background.
        context: Lambda context object

    Returns:
        Response dict with statusCode and a JSON body
    """
    log_level = os.environ.get('LOG_LEVEL', 'INFO')

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    action = (event or {}).get('action', 'refresh')
    start_time = time.time()
    logger.info(f"Lambda execution started", extra={'action': action})

    try:
        service = get_service()
        events = asyncio.run(_dispatch(service, action))
    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return {
            'statusCode': 400 if isinstance(e, ValueError) else 500,
            'body': json.dumps({
                'message': f"Action '{action}' failed",
                'error': str(e),
                'error_type': type(e).__name__,
                'duration_seconds': round(duration, 2)
            })
        }

    duration = time.time() - start_time
    logger.info(
        f"Lambda execution completed successfully",
        extra={
            'duration_seconds': round(duration, 2),
            'events_returned': len(events)
        }
    )

    body = {
        'message': f"Action '{action}' completed successfully",
        'statistics': {
            'events_returned': len(events),
            'duration_seconds': round(duration, 2)
        },
        'event_ids': [record.id for record in events]
    }
    if action != 'clear':
        body['events'] = [record.to_dict() for record in events]

    return {
        'statusCode': 200,
        'body': json.dumps(body)
    }
