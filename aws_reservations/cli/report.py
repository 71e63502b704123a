"""Rich rendering of reservation reports."""

import json
from dataclasses import asdict
from decimal import Decimal
from typing import Dict, Mapping, Union

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from aws_reservations.calculation.grouping import GroupedDBInstances, GroupedEC2Resources
from aws_reservations.calculation.models import (
    ComputeSavingsPlansBalance,
    CoverageStatus,
    ReservedDBBalance,
)
from aws_reservations.core.purchase_method import EC2PurchaseMethod, RDSPurchaseMethod
from aws_reservations.services.models import EC2Resources


def format_amount(value: Union[float, Decimal]) -> str:
    """Render units or dollars without trailing noise: 4.0 -> '4', 0.5 -> '0.5'."""
    if isinstance(value, Decimal):
        return f"{value.normalize():f}" if value != 0 else "0"
    return f"{value:g}"


def _heading(console: Console, text: str, level: int = 1) -> None:
    style = {1: "bold cyan", 2: "bold", 3: "bold dim"}[level]
    console.print(f"[{style}]{'#' * level} {escape(text)}[/{style}]")
    console.print()


def show_rds_reservations(
    console: Console,
    balances: Mapping[str, ReservedDBBalance],
    instances_by_purchase_method: GroupedDBInstances,
) -> None:
    """Render the RDS reserved instance report."""
    _heading(console, "Instances to purchase Reserved Instances")
    console.print("These are instances require purchasing Reserved Instances")
    console.print()

    for key, balance in balances.items():
        _heading(console, key, 2)

        _heading(console, "Running DB Instances", 3)
        for item in balance.db_instances:
            console.print(
                f"* {escape(item.instance.instance_identifier)} ({item.instance.instance_class})"
                f" => {format_amount(item.normalized_unit)}"
            )
        console.print()
        console.print(f"Total running unit: {format_amount(balance.running_units)}")
        console.print()

        _heading(console, "Purchased Reserved DB Instances", 3)
        for item in balance.reserved_db_instances:
            console.print(
                f"* {escape(item.reserved.lease_id)}: ({item.reserved.instance_class} * "
                f"{item.reserved.instance_count}) => {format_amount(item.normalized_unit)}"
            )
        console.print()
        console.print(f"Total purchased unit: {format_amount(balance.purchased_units)}")
        console.print()

        _heading(console, "Purchase required unit", 3)
        if balance.status == CoverageStatus.COVERED:
            console.print("[green]You have already purchased required unit[/green]")
        elif balance.status == CoverageStatus.SHORTFALL:
            console.print(
                f"[yellow]You need to purchase {format_amount(balance.delta)} unit of "
                f"DB Reserved Instances for {escape(key)}[/yellow]"
            )
        else:
            console.print(
                f"[red]Over purchased {format_amount(abs(balance.delta))} unit of "
                f"DB Reserved Instances![/red]"
            )
        console.print()

    _heading(console, "Instances which don't require purchasing Reserved Instances")
    for instance in instances_by_purchase_method[RDSPurchaseMethod.NEEDLESS]:
        console.print(f"* {escape(instance.instance_identifier)}: ({instance.instance_class})")
    console.print()

    _heading(console, "Instances which aren't set ReservationPurchaseMethod tag")
    console.print("Please set `ReservationPurchaseMethod` to calculate")
    console.print()
    for instance in instances_by_purchase_method[RDSPurchaseMethod.UNDEFINED]:
        console.print(f"* {escape(instance.instance_identifier)}: ({instance.instance_class})")


def show_compute_savings_plans(console: Console, balance: ComputeSavingsPlansBalance) -> None:
    """Render the Compute Savings Plans report."""
    _heading(console, "Resources to purchase with Compute Savings Plans")
    _heading(console, "Running Resources", 2)

    console.print("* EC2 Instances")
    for priced in balance.resources.ec2:
        instance = priced.resource
        console.print(
            f"  * {escape(instance.identity_label)} ({instance.instance_type})"
            f" => ${format_amount(priced.hourly_cost)}/hour"
        )

    console.print("* Auto Scaling Groups")
    for priced in balance.resources.asg:
        asg = priced.resource
        console.print(
            f"  * {escape(asg.identity_label)} ({asg.instance_type} * {asg.min_size})"
            f" => ${format_amount(priced.rate)}/hour * {asg.min_size} = ${format_amount(priced.hourly_cost)}/hour"
        )

    console.print("* EKS Nodegroups")
    for priced in balance.resources.eks:
        node_group = priced.resource
        console.print(
            f"  * {escape(node_group.identity_label)} ({node_group.instance_type} * {node_group.min_size})"
            f" => ${format_amount(priced.rate)}/hour * {node_group.min_size}"
            f" = ${format_amount(priced.hourly_cost)}/hour"
        )

    console.print()
    console.print(f"Total: ${format_amount(balance.running_cost)}/hour")
    console.print()

    _heading(console, "Active Savings Plans")
    for plan in balance.savings_plans:
        console.print(f"* {escape(plan.id)}: ${format_amount(plan.commitment)}/hour (Until: {plan.end})")
    console.print()
    console.print(f"Total: ${format_amount(balance.purchased_cost)}/hour")
    console.print()

    _heading(console, "Purchase Required Amount")
    if balance.status == CoverageStatus.SHORTFALL:
        console.print(f"[yellow]You need to purchase additional ${format_amount(balance.delta)}/hour[/yellow]")
    elif balance.status == CoverageStatus.SURPLUS:
        console.print(f"[red]Over purchased ${format_amount(abs(balance.delta))}/hour of Savings Plans![/red]")
    else:
        console.print("[green]You have already purchased required Savings Plans[/green]")


def show_all_ec2_resources(console: Console, grouped: GroupedEC2Resources) -> None:
    """Render every compute resource bucketed by purchase method."""
    _heading(console, "All of the running resources")

    for method in EC2PurchaseMethod:
        resources = grouped[method]
        table = Table(title=method.value, title_justify="left", show_lines=False)
        table.add_column("Kind")
        table.add_column("Name")
        table.add_column("Instance type")
        table.add_column("Count", justify="right")

        for instance in resources.ec2:
            table.add_row("EC2 Instance", escape(instance.identity_label), instance.instance_type, "1")
        for asg in resources.asg:
            table.add_row("AutoScalingGroup", escape(asg.identity_label), asg.instance_type, str(asg.min_size))
        for node_group in resources.eks:
            table.add_row(
                "EKS Nodegroup", escape(node_group.identity_label), node_group.instance_type, str(node_group.min_size)
            )

        console.print(table)
        console.print()


def instance_families_to_json(families: Dict[str, EC2Resources]) -> str:
    return json.dumps({family: asdict(resources) for family, resources in families.items()})


def show_instance_families(console: Console, families: Dict[str, EC2Resources]) -> None:
    """Render EC2 Instance Savings Plans resources by instance family as JSON."""
    console.print_json(instance_families_to_json(families))
