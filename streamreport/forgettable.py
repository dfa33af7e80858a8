"""Sliding window over low-value notices."""

__all__ = ["FORGETTABLE_BUFFER_SIZE", "ForgettableBuffer"]

FORGETTABLE_BUFFER_SIZE = 5


class ForgettableBuffer:
    """Keep the last few forgettable lines so they can be rewritten in place.

    The buffer does not write anything itself. push() tells the caller how many
    previously printed lines to erase and which lines to print instead.
    """

    def __init__(self, capacity: int = FORGETTABLE_BUFFER_SIZE):
        if capacity < 1:
            raise ValueError("Forgettable buffer capacity must be at least 1")
        self.capacity = capacity
        self.lines: list[str] = []
        self.printed = 0  # forgettable lines directly above the cursor

    def __len__(self):
        return len(self.lines)

    def push(self, line: str) -> tuple[int, list[str]]:
        """Add a line; return (lines to erase, lines to print)."""
        self.lines.append(line)
        if len(self.lines) <= self.capacity:
            self.printed += 1
            return 0, [line]
        while len(self.lines) > self.capacity:
            self.lines.pop(0)
        erase = self.printed
        self.printed = len(self.lines)
        return erase, list(self.lines)

    def reset(self):
        """Forget history; the lines already on screen stay there."""
        self.lines.clear()
        self.printed = 0
