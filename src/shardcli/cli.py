import asyncio, logging, sys, time
import click
from click.core import ParameterSource
from botocore.exceptions import BotoCoreError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .adapters.console_sink import StdoutSink
from .adapters.kinesis_boto3 import KinesisClient
from .application.use_cases import (
    create_stream, delete_stream, list_shards, list_streams, push_lines, tail_shard,
)
from .application.utils import iter_lines, make_shard_id, mib_per_s
from .config import load_config
from .domain.errors import ShardCliError
from .domain.value_types import StreamName

console = Console(soft_wrap=True)

ALIASES = {
    "ki": "kinesis",
    "mk": "create",
    "rm": "delete",
    "ls": "list",
    "lss": "list-shards",
}


class AliasedGroup(click.Group):
    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, ALIASES.get(cmd_name, cmd_name))

    def resolve_command(self, ctx, args):
        _, cmd, rest = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, rest


def _setup_logging(verbose: bool) -> None:
    log = logging.getLogger("shardcli")
    log.handlers.clear()
    log.addHandler(RichHandler(console=Console(stderr=True), show_time=False, show_path=False))
    log.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _client(ctx: click.Context) -> KinesisClient:
    obj = ctx.find_object(dict)
    if obj.get("client") is None:
        try:
            obj["client"] = KinesisClient.from_config(load_config(**obj.get("client_opts", {})))
        except BotoCoreError as e:
            raise click.ClickException(f"cannot configure AWS client: {e}")
    return obj["client"]


def _run(coro):
    try:
        return asyncio.run(coro)
    except ShardCliError as e:
        raise click.ClickException(str(e))


@click.group(cls=AliasedGroup)
@click.option("-v", "--verbose", is_flag=True, help="Debug logging on stderr")
@click.pass_context
def cli(ctx, verbose):
    """shardcli: provision, feed and tail partitioned streams."""
    ctx.ensure_object(dict)
    _setup_logging(verbose)


def _remember_client_opt(ctx, param, value):
    # typed on the group or after the subcommand, the later flag wins;
    # env values never override a typed flag
    if value is None:
        return value
    opts = ctx.ensure_object(dict).setdefault("client_opts", {})
    if ctx.get_parameter_source(param.name) is ParameterSource.COMMANDLINE:
        opts[param.name] = value
    else:
        opts.setdefault(param.name, value)
    return value


def client_options(f):
    """--region / --endpoint-url / --profile, accepted on `kinesis` and on every subcommand."""
    opts = [
        click.option("--region", envvar="SHARDCLI_REGION", expose_value=False,
                     callback=_remember_client_opt,
                     help="AWS region; falls back to the boto3 default, then us-east-1"),
        click.option("--endpoint-url", envvar="SHARDCLI_ENDPOINT_URL", expose_value=False,
                     callback=_remember_client_opt,
                     help="Override the service endpoint (e.g. LocalStack)"),
        click.option("--profile", envvar="SHARDCLI_PROFILE", expose_value=False,
                     callback=_remember_client_opt, help="AWS named profile"),
    ]
    for opt in reversed(opts):
        f = opt(f)
    return f


@cli.group("kinesis", cls=AliasedGroup)
@client_options
@click.pass_context
def kinesis(ctx):
    """Kinesis Data Streams commands (alias: ki)."""
    ctx.ensure_object(dict)


@kinesis.command("create")
@client_options
@click.option("--stream-name", required=True)
@click.option("--num-shards", type=click.IntRange(min=1), default=1, show_default=True)
@click.pass_context
def create_cmd(ctx, stream_name, num_shards):
    """Create a stream (alias: mk)."""
    _run(create_stream(_client(ctx), StreamName(stream_name), num_shards))
    console.print(f"Created stream `{escape(stream_name)}` with {num_shards} shard(s).")


@kinesis.command("delete")
@client_options
@click.option("--stream-name", required=True)
@click.pass_context
def delete_cmd(ctx, stream_name):
    """Delete a stream (alias: rm)."""
    _run(delete_stream(_client(ctx), StreamName(stream_name)))
    console.print(f"Deleted stream `{escape(stream_name)}` successfully.")


@kinesis.command("list")
@client_options
@click.pass_context
def list_cmd(ctx):
    """List stream names (alias: ls)."""
    for name in _run(list_streams(_client(ctx))):
        click.echo(name)


@kinesis.command("list-shards")
@client_options
@click.option("--stream-name", required=True)
@click.pass_context
def list_shards_cmd(ctx, stream_name):
    """List shard ids of a stream (alias: lss)."""
    for shard_id in _run(list_shards(_client(ctx), StreamName(stream_name))):
        click.echo(shard_id)


@kinesis.command("push")
@client_options
@click.option("--stream-name", required=True)
@click.pass_context
def push_cmd(ctx, stream_name):
    """Push stdin to a stream, one record per line."""
    api = _client(ctx)
    t0 = time.perf_counter()
    res = _run(push_lines(
        api=api,
        stream=StreamName(stream_name),
        lines=iter_lines(sys.stdin.buffer),
    ))
    elapsed = time.perf_counter() - t0
    console.print(
        f"Pushed {res['records_sent']} records to stream `{escape(stream_name)}` "
        f"in {elapsed:.2f}s ({mib_per_s(res['bytes_sent'], elapsed):.2f} MiB/s)."
    )
    if res["lines_skipped"] or res["failed_records"]:
        console.print(
            f"[yellow]skipped[/]={res['lines_skipped']}  "
            f"[red]rejected[/]={res['failed_records']}  "
            f"(lines={res['lines_seen']}, batches={res['batches']})"
        )


@kinesis.command("tail")
@client_options
@click.option("--stream-name", required=True)
@click.option("--shard-id", type=click.IntRange(min=0), required=True,
              help="Shard index; 3 means shardId-000000000003")
@click.pass_context
def tail_cmd(ctx, stream_name, shard_id):
    """Print new records of one shard as they arrive."""
    _run(tail_shard(
        api=_client(ctx),
        stream=StreamName(stream_name),
        shard_id=make_shard_id(shard_id),
        sink=StdoutSink(),
    ))


if __name__ == "__main__":
    cli()
