"""Seamless HAProxy reload.

A reload starts a new daemonized HAProxy on the freshly compiled configuration
and hands it the PID of the running instance via ``-sf``. The new process
binds the same ports and starts accepting immediately; the old one finishes
its in-flight connections and exits on its own.
"""

import logging
import subprocess
from typing import Any, Callable, List, Optional, Sequence

from ..shared.exceptions import PidFileError, ProcessError

logger = logging.getLogger(__name__)

CommandRunner = Callable[[Sequence[str]], Any]


def run_command(args: Sequence[str]) -> None:
    """Run a command to completion, raising ProcessError on any failure."""
    try:
        result = subprocess.run(list(args), capture_output=True, text=True)
    except OSError as e:
        raise ProcessError(f"Could not start {args[0]}: {e}") from e

    if result.returncode != 0:
        output = (result.stderr or result.stdout or "").strip()
        raise ProcessError(f"{' '.join(args)} exited with status {result.returncode}: {output}")


class ProcessReloader:
    """Reloads the proxy process onto a new configuration."""

    def __init__(
        self,
        config_path: str = "/cfg/haproxy.cfg",
        pid_file: str = "/var/run/haproxy.pid",
        binary: str = "haproxy",
        runner: Optional[CommandRunner] = None,
    ):
        """Initialize the reloader.

        Args:
            config_path: Compiled configuration passed to the proxy
            pid_file: File the proxy writes its PID into
            binary: Proxy executable
            runner: Callable executing an argument list; defaults to
                ``run_command``
        """
        self.config_path = config_path
        self.pid_file = pid_file
        self.binary = binary
        self.runner = runner or run_command

    def read_pid(self) -> str:
        """Read the PID of the running proxy.

        Raises:
            PidFileError: If the PID file is missing, unreadable or empty
        """
        try:
            with open(self.pid_file, "r", encoding="utf-8") as f:
                pid = f.read().strip()
        except OSError as e:
            raise PidFileError(f"Could not read PID file {self.pid_file}: {e}", path=self.pid_file) from e

        if not pid:
            raise PidFileError(f"PID file {self.pid_file} is empty", path=self.pid_file)
        return pid

    def build_command(self, pid: Optional[str] = None) -> List[str]:
        """Build the proxy command line; with a PID it takes over from that process."""
        args = [self.binary, "-f", self.config_path, "-D", "-p", self.pid_file]
        if pid:
            args.extend(["-sf", pid])
        return args

    def reload(self) -> None:
        """Replace the running proxy with one using the current configuration.

        Raises:
            PidFileError: If the current PID cannot be read
            ProcessError: If the reload command fails to start or exits non-zero
        """
        pid = self.read_pid()
        args = self.build_command(pid)
        logger.info(f"Reloading proxy (previous pid {pid}): {' '.join(args)}")
        self._run(args)
        logger.info("Proxy reloaded")

    def start(self) -> None:
        """Start the proxy when no previous instance is running."""
        args = self.build_command()
        logger.info(f"Starting proxy: {' '.join(args)}")
        self._run(args)

    def _run(self, args: List[str]) -> None:
        try:
            result = self.runner(args)
        except ProcessError as e:
            logger.error(f"Proxy command failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Proxy command failed: {e}")
            raise ProcessError(f"Could not run {args[0]}: {e}") from e

        # Runners may also report failure through an exit status
        status = getattr(result, "returncode", result)
        if isinstance(status, int) and not isinstance(status, bool) and status != 0:
            logger.error(f"Proxy command exited with status {status}")
            raise ProcessError(f"{' '.join(args)} exited with status {status}")
