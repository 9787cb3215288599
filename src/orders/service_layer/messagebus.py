# pylint: disable=broad-except
"""Message bus for the orders service."""

from __future__ import annotations
import logging
from typing import List, Dict, Callable, Type, Union, TYPE_CHECKING

from shared.domain.commands import Command, Event
from orders.domain.commands import AttachResult, CreateOrder
from orders.domain.events import OrderCreated, ResultAttached
from orders.service_layer import handlers

if TYPE_CHECKING:
    from orders.service_layer.unit_of_work import OrdersUnitOfWork

logger = logging.getLogger(__name__)

Message = Union[CreateOrder, AttachResult, OrderCreated, ResultAttached]


def handle(
    message: Message,
    uow: OrdersUnitOfWork,
):
    """Handle message (command or event) with the appropriate handler."""
    results = []
    queue = [message]

    while queue:
        message = queue.pop(0)

        if isinstance(message, Event):
            handle_event(message, queue, uow)
        elif isinstance(message, Command):
            cmd_result = handle_command(message, queue, uow)
            results.append(cmd_result)
        else:
            raise Exception(f"{message} was not an Event or Command")

    return results


def handle_event(
    event: Event,
    queue: List[Message],
    uow: OrdersUnitOfWork,
):
    """Handle event by calling all registered event handlers."""
    for handler in EVENT_HANDLERS[type(event)]:
        try:
            logger.debug(f"handling event {event} with handler {handler}")
            handler(event, uow=uow)
            queue.extend(uow.collect_new_events())
        except Exception:
            logger.exception("Exception handling event %s", event)
            continue


def handle_command(
    command: Command,
    queue: List[Message],
    uow: OrdersUnitOfWork,
):
    """Handle command by calling the registered command handler."""
    logger.debug(f"handling command {command}")
    try:
        handler = COMMAND_HANDLERS[type(command)]
        result = handler(command, uow=uow)
        queue.extend(uow.collect_new_events())
        return result
    except Exception:
        logger.exception("Exception handling command %s", command)
        raise


EVENT_HANDLERS = {
    OrderCreated: [handlers.notify_patient_order_scheduled],
    ResultAttached: [handlers.notify_patient_result_available],
}  # type: Dict[Type[Event], List[Callable]]

COMMAND_HANDLERS = {
    CreateOrder: handlers.create_order,
    AttachResult: handlers.attach_result,
}  # type: Dict[Type[Command], Callable]
