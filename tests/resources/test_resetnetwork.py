import aiohttp.web
import pytest

from osbind._cogs.clients.errors import APINotFoundError
from osbind.compute import resetnetwork

SERVER_ID = 'cf4b2a4c-0da2-4d12-9e8c-53bb61a3f8c7'


async def test_resetting_the_network(context, resp_mocker, aresponses, hostname):
    callback = resp_mocker(return_value=aiohttp.web.Response(
        status=202, headers={'X-Compute-Request-Id': 'req-3fd4c8a0'}))
    aresponses.add(hostname, f'/compute/servers/{SERVER_ID}/action', 'post', callback)

    outcome = await resetnetwork.reset_network(server_id=SERVER_ID, context=context)

    assert outcome.status == 202
    assert outcome.request_id == 'req-3fd4c8a0'
    assert callback.call_args[0][0]['data'] == {'resetNetwork': None}


async def test_resetting_of_an_absent_server(context, aresponses, hostname):
    body = {'itemNotFound': {'message': 'Instance could not be found', 'code': 404}}
    aresponses.add(hostname, f'/compute/servers/{SERVER_ID}/action', 'post',
                   aiohttp.web.json_response(body, status=404))
    with pytest.raises(APINotFoundError) as err:
        await resetnetwork.reset_network(server_id=SERVER_ID, context=context)
    assert err.value.message == 'Instance could not be found'
