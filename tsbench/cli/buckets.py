import sys
from typing import Any, Optional

import click
import structlog

from tsbench import settings
from tsbench.admin.buckets import BucketClient
from tsbench.environment import setup_logging
from tsbench.utils.serializable_exception import SerializableException

logger = structlog.get_logger().bind(module=__name__)


@click.group()
@click.option("--url", help="Base URL of the store, INFLUX_URL by default.")
@click.option("--token", help="API token, INFLUX_TOKEN by default.")
@click.option("--org", help="Organization id, INFLUX_ORG by default.")
@click.option("--log-level", help="Logging level to use.")
@click.pass_context
def buckets(
    ctx: Any,
    *,
    url: Optional[str],
    token: Optional[str],
    org: Optional[str],
    log_level: Optional[str] = None,
) -> None:
    """Manage the buckets benchmark data is loaded into."""
    setup_logging(log_level)
    ctx.obj = BucketClient(url=url, token=token, org=org)


@buckets.command(name="list")
@click.pass_obj
def list_buckets(client: BucketClient) -> None:
    try:
        for bucket in client.list_buckets():
            click.echo(f"{bucket.name}\t{bucket.id}\t{bucket.type}")
    except SerializableException as error:
        logger.error("listing buckets failed", **error.to_dict())
        sys.exit(1)


@buckets.command()
@click.argument("name", default=settings.BUCKET_NAME)
@click.pass_obj
def create(client: BucketClient, name: str) -> None:
    try:
        if client.bucket_exists(name):
            click.echo(f"bucket {name} already exists")
            return
        client.create_bucket(name)
    except SerializableException as error:
        logger.error("creating bucket failed", **error.to_dict())
        sys.exit(1)
    click.echo(f"created bucket {name}")


@buckets.command()
@click.argument("name", default=settings.BUCKET_NAME)
@click.pass_obj
def delete(client: BucketClient, name: str) -> None:
    try:
        removed = client.remove_bucket(name)
    except SerializableException as error:
        logger.error("deleting bucket failed", **error.to_dict())
        sys.exit(1)
    if removed:
        click.echo(f"deleted bucket {name}")
    else:
        click.echo(f"bucket {name} does not exist")
