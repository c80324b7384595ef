"""Interface for the user-facing output of the CLI."""

import abc
from typing import Any, Sequence


class UserInterface(abc.ABC):
    """Abstract Base Class for displaying results to the user."""

    @abc.abstractmethod
    def display_values(self, title: str, values: Sequence[Any]) -> None:
        """Displays a list of generated values.

        Args:
            title: Heading describing what was generated.
            values: The values, in the order the server returned them.
        """
        pass

    @abc.abstractmethod
    def display_usage(self, requests_left: int, bits_left: int) -> None:
        """Displays the remaining quota."""
        pass

    @abc.abstractmethod
    def display_error(self, message: str) -> None:
        """Displays an error message."""
        pass
