import asyncio
import dataclasses
import datetime
import functools
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import aiohttp
import click
import yaml

from osbind._cogs.clients import auth, errors
from osbind._cogs.structs import bodies, credentials, options
from osbind._core.actions import loggers
from osbind._core.engines import paging, polling
from osbind.containerinfra import clusters, clustertemplates
from osbind.loadbalancer import loadbalancers
from osbind.objectstorage import containers


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


class EndpointParamType(click.ParamType):
    """ A service's endpoint as ``SERVICE=URL``, e.g. ``compute=https://nova:8774/v2.1``. """
    name = 'endpoint'

    def convert(self, value: Any, param: Any, ctx: Any) -> Tuple[str, str]:
        if isinstance(value, tuple):
            return value
        service, sep, url = str(value).partition('=')
        if not sep or not service or not url:
            self.fail(f"{value!r} is not in the SERVICE=URL format.", param, ctx)
        return service.strip(), url.strip()


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: Optional[bool] = False,
                log_refkey: Optional[str] = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def connection_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to collect the credentials in all commands the same way."""
    @click.option('--token', type=str, envvar='OSBIND_TOKEN', required=True)
    @click.option('--endpoint', 'endpoints', type=EndpointParamType(), multiple=True)
    @click.option('--insecure', is_flag=True, default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(token: str,
                endpoints: List[Tuple[str, str]],
                insecure: Optional[bool],
                *args: Any, **kwargs: Any) -> Any:
        info = credentials.ConnectionInfo(token=token, endpoints=dict(endpoints), insecure=insecure)
        return fn(*args, info=info, **kwargs)

    return wrapper


def serialize(value: Any) -> Any:
    """ Convert the records to the plain JSON/YAML-serializable structures. """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {field.name: serialize(getattr(value, field.name))
                for field in dataclasses.fields(value) if field.name != 'request_id'}
    elif isinstance(value, datetime.datetime):
        return value.isoformat()
    elif isinstance(value, dict):
        return {key: serialize(val) for key, val in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize(item) for item in value]
    else:
        return value


def render(items: Any, output: str) -> str:
    plain = serialize(items)
    if output == 'yaml':
        return yaml.safe_dump(plain, sort_keys=False, default_flow_style=False)
    else:
        return json.dumps(plain, indent=2)


# The expected failures of the commands: reported as messages, not as tracebacks.
COMMAND_ERRORS: Tuple[type, ...] = (
    errors.APIError,
    paging.PaginationError,
    polling.PollingError,
    credentials.LoginError,
    credentials.EndpointError,
    options.MissingFieldError,
    bodies.BodyError,
    aiohttp.ClientError,
    asyncio.TimeoutError,
)


def run_with_context(
        info: credentials.ConnectionInfo,
        fn: Callable[[auth.APIContext], Awaitable[Any]],
) -> Any:

    async def _run() -> Any:
        async with auth.APIContext(info) as context:
            return await fn(context)

    try:
        return asyncio.run(_run())
    except COMMAND_ERRORS as e:
        raise click.ClickException(str(e) or e.__class__.__name__) from e


LISTINGS: Dict[str, Callable[..., paging.Pager[Any]]] = {
    'loadbalancers': lambda context, limit: loadbalancers.list(
        context=context, opts=loadbalancers.ListOpts(limit=limit)),
    'clusters': lambda context, limit: clusters.list(
        context=context, opts=clusters.ListOpts(limit=limit)),
    'clustertemplates': lambda context, limit: clustertemplates.list(
        context=context, opts=clustertemplates.ListOpts(limit=limit)),
    'containers': lambda context, limit: containers.list(
        context=context, opts=containers.ListOpts(full=True, limit=limit)),
}

WAITERS: Dict[str, Callable[..., Awaitable[None]]] = {
    'cluster': lambda **kwargs: clusters.wait_for_status(**kwargs),
    'loadbalancer': lambda **kwargs: loadbalancers.wait_for_status(**kwargs),
}


@click.version_option(prog_name='osbind')
@click.group(name='osbind', context_settings=dict(
    auto_envvar_prefix='OSBIND',
))
def main() -> None:
    pass


@main.command(name='list')
@logging_options
@connection_options
@click.option('--limit', type=int, default=None, help="The page size (not the total number).")
@click.option('-o', '--output', type=click.Choice(['json', 'yaml']), default='json')
@click.argument('kind', type=click.Choice(sorted(LISTINGS)))
def list_(
        info: credentials.ConnectionInfo,
        kind: str,
        limit: Optional[int],
        output: str,
) -> None:
    """ List all the resources of a kind across all pages. """

    async def fn(context: auth.APIContext) -> List[Any]:
        return await LISTINGS[kind](context, limit).extract_all()

    items = run_with_context(info, fn)
    click.echo(render(items, output))


@main.command()
@logging_options
@connection_options
@click.option('-s', '--status', type=str, required=True)
@click.option('-t', '--timeout', type=float, default=None)
@click.option('-i', '--interval', type=float, default=None)
@click.argument('kind', type=click.Choice(sorted(WAITERS)))
@click.argument('id', type=str)
def wait(
        info: credentials.ConnectionInfo,
        kind: str,
        id: str,
        status: str,
        timeout: Optional[float],
        interval: Optional[float],
) -> None:
    """ Wait until the resource reaches the status; fail if it fails or times out. """

    async def fn(context: auth.APIContext) -> None:
        await WAITERS[kind](id=id, status=status, timeout=timeout, interval=interval, context=context)

    run_with_context(info, fn)
    click.echo(f"{kind} {id} is {status}.")


@main.command()
@logging_options
@connection_options
@click.argument('id', type=str)
def failover(
        info: credentials.ConnectionInfo,
        id: str,
) -> None:
    """ Fail over the load balancer's amphorae. """

    async def fn(context: auth.APIContext) -> None:
        await loadbalancers.failover(id=id, context=context)

    run_with_context(info, fn)
    click.echo(f"Failover of the load balancer {id} is requested.")
