import dataclasses
from typing import Optional
from unittest.mock import AsyncMock

import pytest

from osbind._cogs.clients.errors import APINotFoundError, APIServerError
from osbind._core.engines.polling import PollingTimeoutError, ResourceFailedError, \
                                         make_status_check, wait_for_status


@dataclasses.dataclass(frozen=True)
class Thing:
    status: Optional[str]
    status_reason: Optional[str] = None


def status_of(thing):
    return thing.status


def reason_of(thing):
    return thing.status_reason


def not_found():
    return APINotFoundError({'itemNotFound': {'message': "Not found.", 'code': 404}}, status=404)


async def test_target_status_is_success():
    fetch = AsyncMock(return_value=Thing('ACTIVE'))
    check = make_status_check(fetch, kind='Thing', id='id1', target='ACTIVE', status_of=status_of)
    assert await check() is True


async def test_other_status_continues():
    fetch = AsyncMock(return_value=Thing('PENDING_CREATE'))
    check = make_status_check(fetch, kind='Thing', id='id1', target='ACTIVE', status_of=status_of)
    assert await check() is False


async def test_absent_status_continues():
    fetch = AsyncMock(return_value=Thing(None))
    check = make_status_check(fetch, kind='Thing', id='id1', target='ACTIVE', status_of=status_of)
    assert await check() is False


@pytest.mark.parametrize('target', ['DELETE_COMPLETE', 'DELETED'])
async def test_not_found_is_success_when_deleting(target):
    fetch = AsyncMock(side_effect=not_found())
    check = make_status_check(fetch, kind='Thing', id='id1', target=target, status_of=status_of)
    assert await check() is True


async def test_not_found_is_fatal_when_not_deleting():
    error = not_found()
    fetch = AsyncMock(side_effect=error)
    check = make_status_check(fetch, kind='Thing', id='id1', target='ACTIVE', status_of=status_of)
    with pytest.raises(APINotFoundError) as err:
        await check()
    assert err.value is error


async def test_other_api_errors_are_fatal_even_when_deleting():
    error = APIServerError(None, status=500)
    fetch = AsyncMock(side_effect=error)
    check = make_status_check(fetch, kind='Thing', id='id1', target='DELETED', status_of=status_of)
    with pytest.raises(APIServerError) as err:
        await check()
    assert err.value is error


@pytest.mark.parametrize('status', ['CREATE_FAILED', 'FAILED', 'UPDATE_FAILED'])
async def test_failure_marker_raises_with_the_reason(status):
    fetch = AsyncMock(return_value=Thing(status, 'Quota exceeded.'))
    check = make_status_check(fetch, kind='Cluster', id='id1', target='CREATE_COMPLETE',
                              status_of=status_of, reason_of=reason_of)
    with pytest.raises(ResourceFailedError) as err:
        await check()
    assert str(err.value) == f"Cluster id1 FAILED. Status={status} StatusReason=Quota exceeded."
    assert err.value.kind == 'Cluster'
    assert err.value.id == 'id1'
    assert err.value.status == status
    assert err.value.reason == 'Quota exceeded.'


async def test_failure_without_kind_and_reason():
    fetch = AsyncMock(return_value=Thing('CREATE_FAILED'))
    check = make_status_check(fetch, kind=None, id='id1', target='CREATE_COMPLETE', status_of=status_of)
    with pytest.raises(ResourceFailedError) as err:
        await check()
    assert str(err.value) == "Resource id1 FAILED. Status=CREATE_FAILED StatusReason=None"


@pytest.mark.parametrize('status, reason', [('ERROR', 'OFFLINE'), ('CREATE_FAILED', None)])
async def test_custom_failure_markers(status, reason):
    fetch = AsyncMock(return_value=Thing(status, reason))
    check = make_status_check(fetch, kind='LoadBalancer', id='id1', target='ACTIVE',
                              status_of=status_of, reason_of=reason_of,
                              failure_markers=('FAILED', 'ERROR'))
    with pytest.raises(ResourceFailedError) as err:
        await check()
    assert str(err.value) == f"LoadBalancer id1 FAILED. Status={status} StatusReason={reason}"


async def test_no_failure_markers_means_no_failures():
    fetch = AsyncMock(return_value=Thing('CREATE_FAILED'))
    check = make_status_check(fetch, kind='Thing', id='id1', target='ACTIVE',
                              status_of=status_of, failure_markers=())
    assert await check() is False


async def test_failed_target_is_not_a_failure():
    fetch = AsyncMock(return_value=Thing('CREATE_FAILED'))
    check = make_status_check(fetch, kind='Thing', id='id1', target='CREATE_FAILED', status_of=status_of)
    assert await check() is True


async def test_waiting_through_pending_statuses():
    fetch = AsyncMock(side_effect=[Thing('PENDING_CREATE'), Thing('PENDING_CREATE'), Thing('ACTIVE')])
    await wait_for_status(fetch, kind='Cluster', id='id1', target='ACTIVE',
                          timeout=300, interval=0.01, status_of=status_of)
    assert fetch.call_count == 3


async def test_waiting_for_deletion_until_not_found():
    fetch = AsyncMock(side_effect=[Thing('PENDING_DELETE'), not_found()])
    await wait_for_status(fetch, kind='Cluster', id='id1', target='DELETE_COMPLETE',
                          timeout=300, interval=0.01, status_of=status_of)
    assert fetch.call_count == 2


async def test_waiting_stops_on_failure():
    fetch = AsyncMock(side_effect=[Thing('CREATE_IN_PROGRESS'), Thing('CREATE_FAILED', 'boom'), Thing('X')])
    with pytest.raises(ResourceFailedError, match=r"Cluster id1 FAILED\. .* StatusReason=boom"):
        await wait_for_status(fetch, kind='Cluster', id='id1', target='CREATE_COMPLETE',
                              timeout=300, interval=0.01, status_of=status_of, reason_of=reason_of)
    assert fetch.call_count == 2


async def test_waiting_times_out():
    fetch = AsyncMock(return_value=Thing('PENDING_CREATE'))
    with pytest.raises(PollingTimeoutError):
        await wait_for_status(fetch, kind='Cluster', id='id1', target='ACTIVE',
                              timeout=0.05, interval=0.01, status_of=status_of)


async def test_waiting_is_logged_with_the_resource_prefix(logstream):
    fetch = AsyncMock(side_effect=[Thing('PENDING_CREATE'), Thing('ACTIVE')])
    await wait_for_status(fetch, kind='Cluster', id='id1', target='ACTIVE',
                          timeout=300, interval=0.01, status_of=status_of)
    output = logstream.getvalue()
    assert "prefix [Cluster/id1] The status is PENDING_CREATE, waiting for ACTIVE." in output
    assert "prefix [Cluster/id1] The status ACTIVE is reached." in output
