"""Request ids used to correlate log lines of one event or command."""

import itertools
import time

_counter = itertools.count(1)


def new_request_id() -> str:
    """Return an id like ``req_1718000000000_42``."""
    return f"req_{int(time.time() * 1000)}_{next(_counter)}"
