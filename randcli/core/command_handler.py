"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), runs them through
the blocking random service and hands the results to the UI. Client
errors are shown to the user and reported back as a failed command.
"""

import logging
from typing import Any, Callable, Sequence

from randcli.core.services.blocking_service import BlockingRandomService
from randcli.domain.interfaces.user_interface import UserInterface
from randcli.domain.models.errors import RandomClientError

logger = logging.getLogger(__name__)


class CommandHandler:
    """Handles incoming commands and delegates to the random service."""

    def __init__(self, service: BlockingRandomService, ui: UserInterface):
        self.service = service
        self.ui = ui

    def _run_generation(self, title: str, label: str, call: Callable[[], Sequence[Any]]) -> bool:
        try:
            values = call()
        except RandomClientError as e:
            logger.error(f"{label} command failed: {type(e).__name__} - {e}")
            self.ui.display_error(f"{label} command failed: {e}")
            return False
        self.ui.display_values(title, values)
        return True

    def handle_integers(self, n: int, min_value: int, max_value: int, replacement: bool = True) -> bool:
        title = f"{n} integer(s) in [{min_value}, {max_value}]"
        return self._run_generation(
            title, "Integers",
            lambda: self.service.generate_integers(n, min_value, max_value, replacement),
        )

    def handle_decimals(self, n: int, decimal_places: int, replacement: bool = True) -> bool:
        title = f"{n} decimal fraction(s) with {decimal_places} place(s)"
        return self._run_generation(
            title, "Decimals",
            lambda: self.service.generate_decimal_fractions(n, decimal_places, replacement),
        )

    def handle_gaussians(self, n: int, mean: float, standard_deviation: float, significant_digits: int) -> bool:
        title = f"{n} Gaussian(s), mean={mean}, sd={standard_deviation}"
        return self._run_generation(
            title, "Gaussians",
            lambda: self.service.generate_gaussians(n, mean, standard_deviation, significant_digits),
        )

    def handle_strings(self, n: int, length: int, characters: str, replacement: bool = True) -> bool:
        title = f"{n} string(s) of length {length}"
        return self._run_generation(
            title, "Strings",
            lambda: self.service.generate_strings(n, length, characters, replacement),
        )

    def handle_uuids(self, n: int) -> bool:
        return self._run_generation(f"{n} UUID(s)", "UUIDs", lambda: self.service.generate_uuids(n))

    def handle_usage(self) -> bool:
        """Shows the remaining quota, always asking the server."""
        try:
            quota = self.service.get_usage()
        except RandomClientError as e:
            logger.error(f"Usage command failed: {type(e).__name__} - {e}")
            self.ui.display_error(f"Usage command failed: {e}")
            return False
        self.ui.display_usage(quota.requests_left, quota.bits_left)
        return True
