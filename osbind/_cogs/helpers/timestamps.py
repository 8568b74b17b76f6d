"""
Timestamps as they come from and go to the services.

The services are inconsistent in their time formats: some of them add
the timezone (``2016-08-29T06:51:31+00:00``), some do not
(``2019-06-30T04:15:37``), some add microseconds (``2011-08-15T06:19:19.387525``).
All naive timestamps are UTC by the services' convention.
"""
import datetime
from typing import Optional

import iso8601


def parse(value: Optional[str]) -> Optional[datetime.datetime]:
    if not value:
        return None
    return iso8601.parse_date(value, default_timezone=datetime.timezone.utc)


def format_naive(value: datetime.datetime) -> str:
    """ Render a timestamp in the services' query format: naive, in UTC. """
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return value.isoformat()
