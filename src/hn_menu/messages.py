from textual.message import Message


class FeedChanged(Message):
    """Posted when the coordinator's feed, sort, headline or filter result changed."""
