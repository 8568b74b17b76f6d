import aiohttp.web

from osbind.networking import networkipavailabilities

NETWORK_ID = 'cf11ab78-2302-49fa-870f-851a08c7afb8'
AVAILABILITY = {
    "network_id": NETWORK_ID,
    "network_name": "public",
    "project_id": "424e7cf0243c468ca61732ba45973b3e",
    "tenant_id": "424e7cf0243c468ca61732ba45973b3e",
    "total_ips": 253,
    "used_ips": 3,
    "subnet_ip_availability": [
        {
            "cidr": "172.24.4.0/24",
            "ip_version": 4,
            "subnet_id": "4afe6e5f-9649-40db-b18f-64c7ead942bd",
            "subnet_name": "public-subnet",
            "total_ips": 253,
            "used_ips": 3,
        },
        {
            "cidr": "2001:db8::/64",
            "ip_version": 6,
            "subnet_id": "c0c8b8d8-1a82-4b69-9fb4-28f2c8fb0e7c",
            "subnet_name": "ipv6-public-subnet",
            "total_ips": 18446744073709551614,
            "used_ips": 2,
        },
    ],
}


async def test_listing(context, resp_mocker, aresponses, hostname):
    callback = resp_mocker(return_value=aiohttp.web.json_response(
        {'network_ip_availabilities': [AVAILABILITY]}))
    aresponses.add(hostname, '/network/v2.0/network-ip-availabilities', 'get', callback)

    opts = networkipavailabilities.ListOpts(ip_version=6)
    items = await networkipavailabilities.list(opts=opts, context=context).extract_all()

    assert [item.network_name for item in items] == ['public']
    assert dict(callback.call_args[0][0].query) == {'ip_version': '6'}
    assert callback.call_count == 1


async def test_getting(context, resp_mocker, aresponses, hostname):
    callback = resp_mocker(return_value=aiohttp.web.json_response(
        {'network_ip_availability': AVAILABILITY}))
    aresponses.add(hostname, f'/network/v2.0/network-ip-availabilities/{NETWORK_ID}', 'get', callback)

    item = await networkipavailabilities.get(network_id=NETWORK_ID, context=context)

    assert item.total_ips == 253
    assert item.used_ips == 3
    ipv4, ipv6 = item.subnet_ip_availabilities
    assert ipv4.cidr == '172.24.4.0/24'
    assert ipv6.ip_version == 6
    assert ipv6.total_ips == 2**64 - 2
