from textual.message import Message


class ResetRequested(Message):
    """Posted when the heading is clicked to return to the latest stories."""


class ThemeToggleRequested(Message):
    """Posted when the light bulb is clicked."""
