"""
Main CLI entry point for AWS Reservations.

Reports how much Compute Savings Plans and RDS Reserved Instances capacity
must still be purchased for what is running in one region.
"""

import logging
import sys
from functools import wraps
from typing import Callable, Dict, Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler

from aws_reservations import __version__
from aws_reservations.auth.session import SessionFactory
from aws_reservations.calculation.group_key import EngineDescriptionMapping
from aws_reservations.calculation.grouping import (
    group_by_instance_family,
    group_db_instances_by_purchase_method,
    group_ec2_resources_by_purchase_method,
)
from aws_reservations.calculation.reconciliation import (
    reconcile_compute_savings_plans,
    reconcile_reserved_db_instances,
)
from aws_reservations.cli import report
from aws_reservations.core.config import Config, ConfigManager
from aws_reservations.core.exceptions import (
    AuthenticationError,
    CalculationNotImplementedError,
    ConfigurationError,
    InvalidResourceError,
    OfferingNotFoundError,
    ReservationError,
    ServiceError,
)
from aws_reservations.core.purchase_method import EC2PurchaseMethod
from aws_reservations.services.inventory import InventoryLoader


console = Console()
logger = logging.getLogger(__name__)

# Exit codes for different error types
EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_AUTH_ERROR = 3
EXIT_SERVICE_ERROR = 4
EXIT_DATA_ERROR = 5
EXIT_USER_CANCELLED = 130


def handle_errors(command: Callable) -> Callable:
    """Map errors raised by a command to a message and an exit code."""

    @wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except KeyboardInterrupt:
            console.print("\n⚠️  [yellow]Operation cancelled by user[/yellow]")
            sys.exit(EXIT_USER_CANCELLED)
        except ConfigurationError as e:
            console.print(f"❌ [red]Configuration error: {e}[/red]")
            sys.exit(EXIT_CONFIG_ERROR)
        except AuthenticationError as e:
            console.print(f"❌ [red]Authentication error: {e}[/red]")
            sys.exit(EXIT_AUTH_ERROR)
        except ServiceError as e:
            console.print(f"❌ [red]Service error: {e}[/red]")
            sys.exit(EXIT_SERVICE_ERROR)
        except (InvalidResourceError, OfferingNotFoundError, CalculationNotImplementedError) as e:
            console.print(f"❌ [red]Calculation aborted: {e}[/red]")
            sys.exit(EXIT_DATA_ERROR)
        except ReservationError as e:
            console.print(f"❌ [red]{e}[/red]")
            sys.exit(EXIT_GENERAL_ERROR)

    return wrapper


def _load_config(config_manager: ConfigManager) -> Config:
    try:
        return config_manager.load_or_default()
    except ValueError as e:
        raise ConfigurationError(str(e))


def _create_loader(ctx: click.Context) -> Tuple[InventoryLoader, Config]:
    config = _load_config(ctx.obj['config_manager'])
    region = config.resolve_region(ctx.obj['region'])
    session = SessionFactory(config).get_aws_session(region)
    logger.info(f"Running in region {region}")
    return InventoryLoader(session, region, config), config


def _parse_pairs(values: Tuple[str, ...], option: str) -> Dict[str, str]:
    pairs = {}
    for value in values:
        key, separator, item = value.partition('=')
        if not (key and separator):
            raise click.BadParameter(f"Expected KEY=VALUE, got {value!r}", param_hint=option)
        pairs[key] = item
    return pairs


@click.group()
@click.option(
    "--region",
    help="AWS region to inventory (defaults to AWS_REGION, then the configured region)",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Log progress to stderr",
)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context, region: Optional[str] = None, verbose: bool = False) -> None:
    """
    AWS Reservations - purchase planning for Savings Plans and Reserved Instances

    Compares running capacity tagged with ReservationPurchaseMethod against
    the commitments already held and reports the shortfall or surplus.
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )

    ctx.ensure_object(dict)
    ctx.obj['region'] = region
    ctx.obj.setdefault('config_manager', ConfigManager())


@cli.command()
@click.pass_context
@handle_errors
def rds(ctx: click.Context) -> None:
    """Show RDS Reserved Instances to purchase."""
    loader, config = _create_loader(ctx)
    inventory = loader.load_db_inventory()

    instances_by_purchase_method = group_db_instances_by_purchase_method(inventory.db_instances)
    balances = reconcile_reserved_db_instances(
        inventory.db_instances,
        inventory.reserved_db_instances,
        EngineDescriptionMapping(config.engine_product_descriptions),
    )

    report.show_rds_reservations(console, balances, instances_by_purchase_method)


@cli.command(name="compute-savings-plans")
@click.pass_context
@handle_errors
def compute_savings_plans(ctx: click.Context) -> None:
    """Show Compute Savings Plans commitment to purchase."""
    loader, _ = _create_loader(ctx)
    inventory = loader.load_ec2_inventory()
    grouped = group_ec2_resources_by_purchase_method(inventory.instances, inventory.asgs, inventory.node_groups)
    savings_plans = loader.load_savings_plans_inventory()

    balance = reconcile_compute_savings_plans(
        grouped[EC2PurchaseMethod.COMPUTE_SAVINGS_PLANS],
        savings_plans.offerings,
        savings_plans.savings_plans,
    )

    report.show_compute_savings_plans(console, balance)


@cli.command(name="ec2-all")
@click.pass_context
@handle_errors
def ec2_all(ctx: click.Context) -> None:
    """Show every running compute resource by purchase method."""
    loader, _ = _create_loader(ctx)
    inventory = loader.load_ec2_inventory()
    grouped = group_ec2_resources_by_purchase_method(inventory.instances, inventory.asgs, inventory.node_groups)

    report.show_all_ec2_resources(console, grouped)


@cli.command(name="ec2-savings-plans")
@click.pass_context
@handle_errors
def ec2_savings_plans(ctx: click.Context) -> None:
    """Show EC2 Instance Savings Plans resources by instance family as JSON."""
    loader, _ = _create_loader(ctx)
    inventory = loader.load_ec2_inventory()
    grouped = group_ec2_resources_by_purchase_method(inventory.instances, inventory.asgs, inventory.node_groups)

    families = group_by_instance_family(grouped[EC2PurchaseMethod.EC2_INSTANCE_SAVINGS_PLANS])

    report.show_instance_families(console, families)


@cli.command()
@click.option("--default-region", help="Region used when neither --region nor AWS_REGION is set")
@click.option("--role-arn", help="IAM role to assume before calling AWS")
@click.option(
    "--eks-cluster-tag",
    multiple=True,
    metavar="KEY=VALUE",
    help="Only inventory EKS clusters carrying this tag (repeatable)",
)
@click.option(
    "--engine-mapping",
    multiple=True,
    metavar="ENGINE=DESCRIPTION",
    help="Map an RDS engine to a reserved instance product description (repeatable)",
)
@click.pass_context
@handle_errors
def configure(
    ctx: click.Context,
    default_region: Optional[str],
    role_arn: Optional[str],
    eks_cluster_tag: Tuple[str, ...],
    engine_mapping: Tuple[str, ...],
) -> None:
    """Write settings to the configuration file."""
    config_manager: ConfigManager = ctx.obj['config_manager']
    config = _load_config(config_manager)

    updates = {}
    if default_region:
        updates['default_region'] = default_region
    if role_arn:
        updates['iam_role_arn'] = role_arn
    if eks_cluster_tag:
        updates['eks_cluster_tag_filters'] = _parse_pairs(eks_cluster_tag, '--eks-cluster-tag')
    if engine_mapping:
        updates['engine_product_descriptions'] = {
            **config.engine_product_descriptions,
            **_parse_pairs(engine_mapping, '--engine-mapping'),
        }

    try:
        config = Config(**{**config.model_dump(), **updates})
    except ValueError as e:
        raise ConfigurationError(str(e))

    config_manager.save_config(config)
    console.print(f"✅ [green]Configuration saved to {config_manager.get_config_path()}[/green]")


if __name__ == "__main__":
    cli()
