"""Main application entry point: pipe stdio to and from MQTT topics."""

import asyncio
import logging
import signal
import sys
import threading
from dataclasses import asdict
from typing import Any, BinaryIO, Optional

from .config import AppConfig, Direction, load_config
from .mqtt import PahoClient
from .streams import MQTTReader, MQTTWriter
from .utils import get_logger, redact_sensitive

logger = get_logger(__name__)

READ_CHUNK_SIZE = 4096


def copy_stream(reader: MQTTReader, output: BinaryIO, chunk_size: int = READ_CHUNK_SIZE) -> int:
    """Copy everything the reader yields to ``output`` until end of stream."""
    total = 0
    while True:
        data = reader.read(chunk_size)
        if not data:
            return total
        output.write(data)
        output.flush()
        total += len(data)


def publish_lines(source: BinaryIO, writer: MQTTWriter) -> int:
    """Publish each line of ``source`` as one message, without its line ending."""
    count = 0
    for line in source:
        writer.write(line.rstrip(b"\r\n"))
        count += 1
    return count


class MQTTStreamService:
    """
    Bridges stdin to a topic, or subscribed topics to stdout.
    """

    def __init__(self, stdin: Optional[BinaryIO] = None, stdout: Optional[BinaryIO] = None) -> None:
        self.config: Optional[AppConfig] = None
        self.mqtt_client: Optional[PahoClient] = None
        self.reader: Optional[MQTTReader] = None
        self.writer: Optional[MQTTWriter] = None
        self.stdin: BinaryIO = stdin or sys.stdin.buffer
        self.stdout: BinaryIO = stdout or sys.stdout.buffer
        self._shutdown_event: asyncio.Event = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._failure: Optional[BaseException] = None

    def initialize(self) -> None:
        """Load configuration, connect, and open the configured stream."""
        logger.info("Loading configuration")
        self.config = load_config()
        logging.getLogger().setLevel(self.config.log_level)
        logging.getLogger("mqttstream").setLevel(self.config.log_level)
        logger.debug(f"MQTT configuration: {redact_sensitive(asdict(self.config.mqtt))}")

        self.mqtt_client = PahoClient(self.config.mqtt)
        self.mqtt_client.connect()

        stream = self.config.stream
        if stream.direction is Direction.SUBSCRIBE:
            self.reader = MQTTReader(
                self.mqtt_client, stream.qos, *stream.topics, buffer_size=stream.buffer_size
            )
        else:
            self.writer = MQTTWriter(self.mqtt_client, stream.qos, stream.retain, stream.topics[0])

        logger.info(f"Stream opened ({stream.direction.value}: {', '.join(stream.topics)})")

    def _pump(self) -> None:
        """Blocking copy loop; runs on its own thread."""
        try:
            if self.reader is not None:
                total = copy_stream(self.reader, self.stdout)
                logger.info(f"Reader reached end of stream after {total} bytes")
            elif self.writer is not None:
                count = publish_lines(self.stdin, self.writer)
                logger.info(f"Published {count} messages from stdin")
        except Exception as e:
            logger.error(f"Stream failed: {e}", exc_info=True)
            self._failure = e
        finally:
            if self._loop is not None:
                self._loop.call_soon_threadsafe(self._shutdown_event.set)

    async def run(self) -> None:
        """Main service loop."""
        self._loop = asyncio.get_running_loop()
        try:
            await self._loop.run_in_executor(None, self.initialize)

            # Daemon thread: a read blocked on stdin must not hold up exit
            pump = threading.Thread(target=self._pump, name="mqttstream-pump", daemon=True)
            pump.start()

            logger.info("Service is running")
            await self._shutdown_event.wait()
            logger.info("Shutdown signal received")

        except Exception as e:
            logger.critical(f"Service failed: {e}", exc_info=True)
            raise
        finally:
            self.shutdown()

        if self._failure is not None:
            raise self._failure

    def shutdown(self) -> None:
        """Graceful shutdown of all components."""
        logger.info("Shutting down service")

        if self.reader is not None:
            try:
                self.reader.close()
            except Exception as e:
                logger.warning(f"Failed to close reader cleanly: {e}")

        if self.writer is not None:
            self.writer.close()

        if self.mqtt_client is not None:
            self.mqtt_client.disconnect()

        logger.info("Service shutdown complete")

    def signal_handler(self, sig: int, frame: Any) -> None:
        """Handle shutdown signals (SIGINT, SIGTERM)."""
        logger.info(f"Received signal {sig}, initiating shutdown")
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self._shutdown_event.set)
        else:
            self._shutdown_event.set()


async def main() -> None:
    """Application entry point."""
    service = MQTTStreamService()

    # Register signal handlers
    signal.signal(signal.SIGINT, service.signal_handler)
    signal.signal(signal.SIGTERM, service.signal_handler)

    await service.run()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
