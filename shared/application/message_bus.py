"""
Message Bus

Views and tasks send commands here instead of calling use cases directly;
committed domain events are fanned out to their subscribers from here.
"""

from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent
from shared.domain.errors import DomainError

logger = logging.getLogger(__name__)

CommandHandler = Callable[[Any], Any]
EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    Commands have exactly one handler and return its result.
    Events have any number of subscribers and return nothing.
    """

    def __init__(self):
        self._command_handlers: Dict[Type, CommandHandler] = {}
        self._subscribers: DefaultDict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    def register_command_handler(self, command_type: Type, handler: CommandHandler):
        if command_type in self._command_handlers:
            raise ValueError(f"{command_type.__name__} already has a handler")
        self._command_handlers[command_type] = handler
        logger.debug(f"Registered command handler for {command_type.__name__}")

    def has_command_handler(self, command_type: Type) -> bool:
        return command_type in self._command_handlers

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        """Subscribe ``handler``; subscribing it twice keeps one entry"""
        subscribers = self._subscribers[event_type]
        if handler not in subscribers:
            subscribers.append(handler)
            logger.debug(f"Subscribed {handler.__name__} to {event_type.__name__}")

    def handle_command(self, command: Any) -> Any:
        """
        Run the command's handler and return what it returns

        Domain errors (missing quote, shortfall, duplicate booking) are
        logged as warnings, anything else as errors; both propagate.
        """
        name = type(command).__name__
        handler = self._command_handlers.get(type(command))
        if handler is None:
            raise ValueError(f"No handler registered for command {name}")

        logger.info(f"Handling command: {name}")
        try:
            return handler(command)
        except DomainError as e:
            logger.warning(f"Command {name} rejected with {e.code.value}: {e}")
            raise
        except Exception as e:
            logger.error(f"Command {name} failed: {e}", exc_info=True)
            raise

    def publish_events(self, events: Iterable[DomainEvent]):
        """Deliver each event to every subscriber; a failing subscriber is logged and skipped"""
        for event in events:
            subscribers = self._subscribers.get(type(event), [])
            if not subscribers:
                logger.debug(f"No subscribers for {type(event).__name__}")
                continue

            logger.info(f"Publishing event: {type(event).__name__} (ID: {event.event_id})")
            for handler in subscribers:
                self._deliver(event, handler)

    def _deliver(self, event: DomainEvent, handler: EventHandler):
        try:
            handler(event)
        except Exception as e:
            logger.error(
                f"Subscriber {handler.__name__} failed on {type(event).__name__} "
                f"for aggregate {event.aggregate_id}: {e}",
                exc_info=True,
            )


# Global message bus instance
message_bus = MessageBus()
