"""
Package-manager adapter — run install/remove through the system package manager.

Tool names come from a remote catalog and are treated as untrusted.
They are passed as separate argv elements after a ``--`` end-of-options
marker and never through a shell, so no name can become a flag or a
shell fragment. ``shlex.quote`` is used only to render the command
line for logs.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import time
from dataclasses import dataclass

from cyber_toolkit.adapters.base import Adapter
from cyber_toolkit.core.models.action import PackageInvocation, Receipt

logger = logging.getLogger(__name__)

_OUTPUT_TAIL = 2000


@dataclass(frozen=True)
class ManagerSpec:
    """Command-line shape of one package manager."""

    binary: str
    install_args: tuple[str, ...]
    remove_args: tuple[str, ...]


MANAGERS: dict[str, ManagerSpec] = {
    "pacman": ManagerSpec(
        binary="pacman",
        install_args=("-Syu", "--noconfirm", "--needed"),
        remove_args=("-Runs", "--noconfirm"),
    ),
    "apt": ManagerSpec(
        binary="apt-get",
        install_args=("install", "-y"),
        remove_args=("remove", "-y"),
    ),
    "dnf": ManagerSpec(
        binary="dnf",
        install_args=("install", "-y"),
        remove_args=("remove", "-y"),
    ),
}


def format_argv(argv: list[str]) -> str:
    """Render an argv list as a copy-pasteable shell command."""
    return " ".join(shlex.quote(a) for a in argv)


class PackageManagerAdapter(Adapter):
    """Invoke a real package manager as a blocking child process.

    Args:
        manager: Key into ``MANAGERS``.
        use_sudo: ``auto`` prefixes ``sudo`` when not running as root,
            ``always`` and ``never`` force the choice.
        timeout: Seconds before the child is killed (None = no limit).
    """

    def __init__(
        self,
        manager: str = "pacman",
        use_sudo: str = "auto",
        timeout: int | None = None,
    ):
        if manager not in MANAGERS:
            raise ValueError(f"Unsupported package manager: {manager}")
        self._manager = manager
        self._spec = MANAGERS[manager]
        self._use_sudo = use_sudo
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self._manager

    @property
    def needs_sudo(self) -> bool:
        if self._use_sudo == "always":
            return True
        if self._use_sudo == "never":
            return False
        return os.geteuid() != 0

    def is_available(self) -> bool:
        if shutil.which(self._spec.binary) is None:
            return False
        if self.needs_sudo and shutil.which("sudo") is None:
            return False
        return True

    def build_argv(self, invocation: PackageInvocation) -> list[str]:
        args = self._spec.install_args if invocation.verb == "install" else self._spec.remove_args
        argv = [self._spec.binary, *args, "--", *invocation.tools]
        if self.needs_sudo:
            argv = ["sudo", *argv]
        return argv

    def execute(self, invocation: PackageInvocation) -> Receipt:
        argv = self.build_argv(invocation)
        command = format_argv(argv)
        logger.info("CMD %s", command)
        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                invocation=invocation,
                error=f"Command timed out after {self._timeout}s",
                duration_ms=_elapsed_ms(start),
                metadata={"command": command},
            )
        except (OSError, ValueError) as e:
            # OSError: binary or sudo missing / not executable.
            # ValueError: argv contains a NUL byte.
            logger.warning("Cannot launch %s: %s", command, e)
            return Receipt.launch_failure(
                adapter=self.name,
                invocation=invocation,
                error=f"Cannot launch {self._spec.binary}: {e}",
                duration_ms=_elapsed_ms(start),
                metadata={"command": command},
            )

        elapsed_ms = _elapsed_ms(start)
        stdout = (result.stdout or "")[-_OUTPUT_TAIL:]
        stderr = (result.stderr or "")[-_OUTPUT_TAIL:]
        if stdout:
            logger.debug("STDOUT %s", stdout.strip())
        if stderr:
            logger.debug("STDERR %s", stderr.strip())

        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                invocation=invocation,
                output=stdout.strip(),
                duration_ms=elapsed_ms,
                metadata={"command": command},
            )

        return Receipt.failure(
            adapter=self.name,
            invocation=invocation,
            error=stderr.strip() or f"Command exited with code {result.returncode}",
            returncode=result.returncode,
            output=stdout.strip(),
            duration_ms=elapsed_ms,
            metadata={"command": command},
        )


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
