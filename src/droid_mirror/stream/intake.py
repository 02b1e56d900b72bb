"""Command intake - read client messages and drive device input."""

from __future__ import annotations

from typing import Any

import structlog

from droid_mirror.device.input import InputSink
from droid_mirror.errors import MirrorError, input_failed_error
from droid_mirror.stream.outbox import Outbox
from droid_mirror.stream.protocol import decode_command, error_message
from droid_mirror.stream.transport import Transport, TransportClosed

logger = structlog.get_logger()


class CommandIntake:
    """Reads the connection and is the session's disconnect detector."""

    def __init__(
        self,
        device_id: str,
        transport: Transport,
        outbox: Outbox,
        input_sink: InputSink,
        *,
        default_swipe_duration_ms: int,
        report_invalid_commands: bool = False,
    ) -> None:
        self._device_id = device_id
        self._transport = transport
        self._outbox = outbox
        self._sink = input_sink
        self._default_swipe_duration_ms = default_swipe_duration_ms
        self._report_invalid_commands = report_invalid_commands
        self.commands_handled = 0
        self.commands_failed = 0

    async def run(self) -> None:
        """Read until the client disconnects or a reply cannot be written."""
        while True:
            try:
                message = await self._transport.receive()
            except TransportClosed as exc:
                logger.info(
                    "client_disconnected",
                    device_id=self._device_id,
                    remote=self._transport.remote,
                    reason=exc.reason,
                    code=exc.code,
                )
                return

            if not message.is_text:
                logger.debug(
                    "binary_message_ignored",
                    device_id=self._device_id,
                    size=len(message.data or b""),
                )
                continue

            reply = await self.handle_text(message.text or "")
            if reply is None:
                continue
            try:
                await self._outbox.send_json(reply)
            except TransportClosed:
                return

    async def handle_text(self, raw: str) -> dict[str, Any] | None:
        """Decode, validate and dispatch one text message.

        Returns:
            The ack or error to send back, or None when nothing is sent
        """
        try:
            command = decode_command(
                raw, default_swipe_duration_ms=self._default_swipe_duration_ms
            )
        except MirrorError as exc:
            logger.warning(
                "command_decode_failed",
                device_id=self._device_id,
                code=exc.code,
                reason=exc.message,
            )
            return error_message(exc)

        try:
            command.ensure_valid()
        except MirrorError as exc:
            logger.warning(
                "command_rejected",
                device_id=self._device_id,
                input_type=command.type,
                reason=exc.context.get("reason"),
            )
            if self._report_invalid_commands:
                return error_message(exc)
            return None

        try:
            await self._sink.inject(self._device_id, command)
        except MirrorError as exc:
            self.commands_failed += 1
            if exc.code != "ERR_INPUT_FAILED":
                exc = input_failed_error(command.type, exc.message)
            return error_message(exc)
        except Exception as exc:
            self.commands_failed += 1
            logger.exception("input_dispatch_error", device_id=self._device_id)
            return error_message(input_failed_error(command.type, str(exc)))

        self.commands_handled += 1
        logger.info(
            "command_dispatched",
            device_id=self._device_id,
            input_type=command.type,
            **command.model_dump(exclude={"type"}),
        )
        return command.ack()
