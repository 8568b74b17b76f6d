import aiohttp.web
import pytest

from osbind.cdn import serviceassets

SERVICE_ID = '96737ae3-cfc1-4c72-be88-5d0e7cc9a3f0'
ASSETS_PATH = f'/cdn/services/{SERVICE_ID}/assets'


@pytest.mark.parametrize('opts, expected_query', [
    (None, {}),
    (serviceassets.DeleteOpts(all=True), {'all': 'true'}),
    (serviceassets.DeleteOpts(url='/images/logo.png'), {'url': '/images/logo.png'}),
])
async def test_purging(context, resp_mocker, aresponses, hostname, opts, expected_query):
    callback = resp_mocker(return_value=aiohttp.web.Response(status=202))
    aresponses.add(hostname, ASSETS_PATH, 'delete', callback)

    outcome = await serviceassets.delete(service_id=SERVICE_ID, opts=opts, context=context)

    assert outcome.status == 202
    assert dict(callback.call_args[0][0].query) == expected_query


async def test_purging_of_one_and_all_at_once(context):
    opts = serviceassets.DeleteOpts(url='/images/logo.png', all=True)
    with pytest.raises(ValueError, match=r"not both"):
        await serviceassets.delete(service_id=SERVICE_ID, opts=opts, context=context)
