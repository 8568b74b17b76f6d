import asyncio
import json

import aiohttp
import pytest
import yaml

from osbind._cogs.clients.errors import APIError
from osbind._cogs.structs.credentials import LoginError
from osbind._cogs.structs.options import MissingFieldError
from osbind._cogs.structs.records import Outcome
from osbind._core.engines.polling import PollingTimeoutError, ResourceFailedError
from osbind.loadbalancer.loadbalancers import LoadBalancer

CONNECTION = ['-q', '--token', 'fake-token',
              '--endpoint', 'load-balancer=https://fake-host/load-balancer',
              '--endpoint', 'container-infra=https://fake-host/container-infra']


@pytest.fixture()
def loadbalancers_list(mocker):
    items = [
        LoadBalancer(id='c331058c-6a40-4144-948e-b9fb1df9db4b', name='web_lb', request_id='r1'),
        LoadBalancer(id='36e08a3e-a78f-4b40-a229-1e7e23eee1ab', name='db_lb', request_id='r1'),
    ]
    pager = mocker.Mock()
    pager.extract_all = mocker.AsyncMock(return_value=items)
    return mocker.patch('osbind.loadbalancer.loadbalancers.list', return_value=pager)


def test_listing_as_json(invoke, loadbalancers_list):
    result = invoke(['list', *CONNECTION, 'loadbalancers'])
    assert result.exit_code == 0, result.output
    decoded = json.loads(result.stdout)
    assert [item['name'] for item in decoded] == ['web_lb', 'db_lb']
    assert decoded[0]['id'] == 'c331058c-6a40-4144-948e-b9fb1df9db4b'
    assert decoded[0]['tags'] == []
    assert 'request_id' not in decoded[0]


def test_listing_as_yaml(invoke, loadbalancers_list):
    result = invoke(['list', *CONNECTION, '-o', 'yaml', 'loadbalancers'])
    assert result.exit_code == 0, result.output
    decoded = yaml.safe_load(result.stdout)
    assert [item['name'] for item in decoded] == ['web_lb', 'db_lb']


def test_listing_passes_the_page_size(invoke, loadbalancers_list):
    result = invoke(['list', *CONNECTION, '--limit', '2', 'loadbalancers'])
    assert result.exit_code == 0, result.output
    assert loadbalancers_list.call_count == 1
    assert loadbalancers_list.call_args.kwargs['opts'].limit == 2


def test_listing_of_unknown_kinds(invoke):
    result = invoke(['list', *CONNECTION, 'servers'])
    assert result.exit_code == 2
    assert 'servers' in result.output


def test_listing_failure(invoke, mocker):
    error = APIError({'message': 'boom'}, status=500, method='get', url='https://fake-host/x')
    pager = mocker.Mock()
    pager.extract_all = mocker.AsyncMock(side_effect=error)
    mocker.patch('osbind.loadbalancer.loadbalancers.list', return_value=pager)
    result = invoke(['list', *CONNECTION, 'loadbalancers'])
    assert result.exit_code == 1
    assert 'Error: HTTP 500: boom <- GET https://fake-host/x' in result.output


def test_waiting_success(invoke, mocker):
    waiter = mocker.patch('osbind.containerinfra.clusters.wait_for_status')
    result = invoke(['wait', *CONNECTION, '-s', 'CREATE_COMPLETE', '-t', '60', '-i', '5',
                     'cluster', 'c1'])
    assert result.exit_code == 0, result.output
    assert 'cluster c1 is CREATE_COMPLETE.' in result.stdout
    assert waiter.await_count == 1
    kwargs = waiter.call_args.kwargs
    assert kwargs['id'] == 'c1'
    assert kwargs['status'] == 'CREATE_COMPLETE'
    assert kwargs['timeout'] == 60.0
    assert kwargs['interval'] == 5.0


def test_waiting_defaults_to_the_settings(invoke, mocker):
    waiter = mocker.patch('osbind.loadbalancer.loadbalancers.wait_for_status')
    result = invoke(['wait', *CONNECTION, '-s', 'ACTIVE', 'loadbalancer', 'lb1'])
    assert result.exit_code == 0, result.output
    kwargs = waiter.call_args.kwargs
    assert kwargs['timeout'] is None
    assert kwargs['interval'] is None


@pytest.mark.parametrize('error, message', [
    (ResourceFailedError(kind='Cluster', id='c1', status='CREATE_FAILED', reason='Quota exceeded'),
     'Error: Cluster c1 FAILED. Status=CREATE_FAILED StatusReason=Quota exceeded'),
    (PollingTimeoutError(timeout=1.0, elapsed=1.0),
     'Error: The condition was not reached in 1.000s (timeout: 1.0s).'),
])
def test_waiting_failure(invoke, mocker, error, message):
    mocker.patch('osbind.containerinfra.clusters.wait_for_status', side_effect=error)
    result = invoke(['wait', *CONNECTION, '-s', 'CREATE_COMPLETE', 'cluster', 'c1'])
    assert result.exit_code == 1
    assert message in result.output


def test_waiting_requires_a_status(invoke):
    result = invoke(['wait', *CONNECTION, 'cluster', 'c1'])
    assert result.exit_code == 2
    assert '--status' in result.output


def test_failover(invoke, mocker):
    failover = mocker.patch('osbind.loadbalancer.loadbalancers.failover',
                            return_value=Outcome(status=202))
    result = invoke(['failover', *CONNECTION, 'lb1'])
    assert result.exit_code == 0, result.output
    assert 'Failover of the load balancer lb1 is requested.' in result.stdout
    assert failover.call_args.kwargs['id'] == 'lb1'


def test_failover_conflict(invoke, mocker):
    error = APIError({'faultstring': 'Invalid state PENDING_UPDATE'}, status=409)
    mocker.patch('osbind.loadbalancer.loadbalancers.failover', side_effect=error)
    result = invoke(['failover', *CONNECTION, 'lb1'])
    assert result.exit_code == 1
    assert 'Invalid state PENDING_UPDATE' in result.output


def test_token_is_required(invoke):
    result = invoke(['failover', '--endpoint', 'load-balancer=https://x', 'lb1'])
    assert result.exit_code == 2
    assert '--token' in result.output


def test_token_from_the_environment(runner, mocker):
    from osbind.cli import main
    failover = mocker.patch('osbind.loadbalancer.loadbalancers.failover',
                            return_value=Outcome(status=202))
    result = runner.invoke(main, ['failover', '-q', '--endpoint', 'load-balancer=https://x', 'lb1'],
                           env={'OSBIND_TOKEN': 'env-token'})
    assert result.exit_code == 0, result.output
    assert failover.call_args.kwargs['context'].info.token == 'env-token'


@pytest.mark.parametrize('endpoint', ['load-balancer', '=https://x', 'load-balancer='])
def test_malformed_endpoints(invoke, endpoint):
    result = invoke(['failover', '--token', 't', '--endpoint', endpoint, 'lb1'])
    assert result.exit_code == 2
    assert 'SERVICE=URL' in result.output


def test_listing_of_clustertemplates_passes_the_page_size(invoke, mocker):
    pager = mocker.Mock()
    pager.extract_all = mocker.AsyncMock(return_value=[])
    listing = mocker.patch('osbind.containerinfra.clustertemplates.list', return_value=pager)
    result = invoke(['list', *CONNECTION, '--limit', '3', 'clustertemplates'])
    assert result.exit_code == 0, result.output
    assert listing.call_args.kwargs['opts'].limit == 3


def test_missing_endpoint_of_the_service(invoke):
    result = invoke(['list', '-q', '--token', 'fake-token', 'loadbalancers'])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Error: No endpoint is configured for the service 'load-balancer'." in result.output


@pytest.mark.parametrize('error, message', [
    (LoginError("No token is provided for the API calls."),
     'Error: No token is provided for the API calls.'),
    (MissingFieldError('vip_subnet_id', what='CreateOpts'),
     "Error: The field 'vip_subnet_id' is required in CreateOpts."),
    (aiohttp.ClientConnectionError("Connection refused"),
     'Error: Connection refused'),
    (asyncio.TimeoutError(),
     'Error: TimeoutError'),
])
def test_failover_failures_are_reported_without_tracebacks(invoke, mocker, error, message):
    mocker.patch('osbind.loadbalancer.loadbalancers.failover', side_effect=error)
    result = invoke(['failover', *CONNECTION, 'lb1'])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert message in result.output
