"""
Background audio worker.

Role playback is queued to a daemon thread so loading and starting samples
never stalls the display loop.
"""

import logging
import queue
import threading

from pintura_sonora.config import AudioConfig

logger = logging.getLogger(__name__)


class AudioCommand:
    """Represents an audio command to be executed."""

    def __init__(self, command_type, **kwargs):
        """
        Initialize an audio command.

        Args:
            command_type (str): 'play_role', 'set_volume' or 'stop_all'
            **kwargs: Command-specific parameters
        """
        self.command_type = command_type
        self.params = kwargs


class AudioWorker(threading.Thread):
    """
    Background thread executing audio commands for a `RoleSoundPlayer`.
    """

    def __init__(self, player, stop_event, queue_maxsize=AudioConfig.QUEUE_MAXSIZE):
        """
        Initialize the audio worker.

        Args:
            player (RoleSoundPlayer): Player executing the commands
            stop_event (threading.Event): Event to signal shutdown
            queue_maxsize (int): Maximum size of command queue
        """
        super().__init__(daemon=True, name="AudioWorker")

        self.player = player
        self.stop_event = stop_event
        self.command_queue = queue.Queue(maxsize=queue_maxsize)

        logger.info("AudioWorker initialized")

    def enqueue_command(self, command):
        """
        Add an audio command to the queue (non-blocking).

        Args:
            command (AudioCommand): Command to execute

        Returns:
            bool: True if command was enqueued, False if queue was full
        """
        try:
            self.command_queue.put_nowait(command)
            return True
        except queue.Full:
            logger.warning(f"Audio queue full, dropping command: {command.command_type}")
            return False

    def play_role(self, role):
        """Queue playback of a zone role. Usable directly as a trigger callback."""
        return self.enqueue_command(AudioCommand('play_role', role=role))

    def run(self):
        """Main worker loop - processes audio commands from queue."""
        logger.info("AudioWorker started")

        while not self.stop_event.is_set():
            try:
                command = self.command_queue.get(timeout=AudioConfig.QUEUE_GET_TIMEOUT)
            except queue.Empty:
                continue

            try:
                self._execute_command(command)
            except Exception as e:
                logger.error(f"Error processing audio command: {e}", exc_info=True)
            finally:
                self.command_queue.task_done()

        logger.info("AudioWorker stopped")

    def _execute_command(self, command):
        """
        Execute a single audio command.

        Args:
            command (AudioCommand): Command to execute
        """
        cmd_type = command.command_type
        params = command.params

        if cmd_type == 'play_role':
            self.player.play_role(params['role'])
        elif cmd_type == 'set_volume':
            self.player.set_volume(params['volume'])
        elif cmd_type == 'stop_all':
            self.player.stop_all()
        else:
            logger.warning(f"Unknown audio command: {cmd_type}")

    def stop(self, timeout=AudioConfig.THREAD_SHUTDOWN_TIMEOUT):
        """Stop playback and wait for the thread to finish."""
        self.stop_event.set()
        if self.is_alive():
            self.join(timeout=timeout)
        self.player.stop_all()
