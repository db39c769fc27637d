"""Tinsel — Secret Santa gift exchange service.

One party, one derangement, one private link per guest.
"""

__version__ = "0.1.0"
