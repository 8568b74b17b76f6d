"""
Typed results of the API calls.

The records are the decoded response bodies: frozen dataclasses with
the fields named after the services' JSON fields. Every record remembers
the request id of the response it came from (if the service provided one)
for diagnostics and for reporting to the services' operators; the request id
is not a part of the record's data and is not compared or shown in reprs.

The endpoints with no response bodies (deletions, actions) produce
the outcomes: only the status and the headers of the response.
"""
import dataclasses
from typing import Mapping, Optional


@dataclasses.dataclass(frozen=True)
class Record:
    request_id: Optional[str] = dataclasses.field(
        default=None, compare=False, repr=False, kw_only=True)


@dataclasses.dataclass(frozen=True)
class Outcome:
    status: int
    request_id: Optional[str] = None
    headers: Mapping[str, str] = dataclasses.field(default_factory=dict, compare=False, repr=False)
