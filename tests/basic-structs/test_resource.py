import pytest

from osbind._cogs.structs.references import Resource


@pytest.fixture()
def resource():
    return Resource('load-balancer', 'v2.0/lbaas/loadbalancers', kind='LoadBalancer')


def test_creation_with_all_fields(resource):
    assert resource.service == 'load-balancer'
    assert resource.path == 'v2.0/lbaas/loadbalancers'
    assert resource.kind == 'LoadBalancer'


def test_repr(resource):
    assert repr(resource) == 'load-balancer:v2.0/lbaas/loadbalancers'
    assert repr(Resource('object-store', '')) == 'object-store'


def test_list_url(resource):
    assert resource.get_url() == 'v2.0/lbaas/loadbalancers'


def test_individual_url(resource):
    assert resource.get_url(name='abc') == 'v2.0/lbaas/loadbalancers/abc'


def test_subresource_url(resource):
    assert resource.get_url(name='abc', subresource='status') == 'v2.0/lbaas/loadbalancers/abc/status'


def test_subresource_requires_a_name(resource):
    with pytest.raises(ValueError, match=r"Subresources"):
        resource.get_url(subresource='status')


def test_multi_segment_names():
    resource = Resource('container-infra', 'v1/quotas')
    assert resource.get_url(name=('proj', 'Cluster')) == 'v1/quotas/proj/Cluster'


@pytest.mark.parametrize('name', ['', ['a', '']])
def test_empty_names_are_prohibited(resource, name):
    with pytest.raises(ValueError, match=r"Empty identifiers"):
        resource.get_url(name=name)


def test_names_are_quoted():
    resource = Resource('object-store', '')
    assert resource.get_url(name='test&happy?-') == 'test%26happy%3F-'
    assert resource.get_url(name='a/b c') == 'a%2Fb%20c'


def test_params_are_added(resource):
    url = resource.get_url(params={'limit': '2', 'marker': 'a b'})
    assert url == 'v2.0/lbaas/loadbalancers?limit=2&marker=a+b'


def test_root_resources_with_params():
    resource = Resource('object-store', '')
    assert resource.get_url(params={'format': 'json'}) == '?format=json'
    assert resource.get_url() == ''


def test_absolute_urls_with_a_server(resource):
    url = resource.get_url(server='https://fake-host/', name='abc')
    assert url == 'https://fake-host/v2.0/lbaas/loadbalancers/abc'
