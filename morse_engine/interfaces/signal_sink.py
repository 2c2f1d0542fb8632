"""
Output-side interface for the Morse signal engine.
Defines the contract every signal sink implements.
"""

from abc import ABC, abstractmethod

class SignalSink(ABC):
    """
    Interface for anything that can key a signal on and off.

    The scheduler calls set_signal only from its playback worker, so
    implementations need no locking of their own for that path. Calls are
    expected to return quickly compared with one dot.
    """

    @abstractmethod
    def set_signal(self, on: bool) -> None:
        """
        Assert or release the signal.

        Args:
            on: True to turn the signal on, False to turn it off

        Raises:
            SignalSinkError: if the command could not be delivered
        """
        pass

    def close(self) -> None:
        """Release the underlying device. Default does nothing."""
        pass
