"""
Equivalence-class keys for matching running DB instances with reserved DB instances.

A running instance and a reservation are reconciled together when they share
``<db.family>/<engine or product description>/<MultiAZ|SingleAZ>``.
"""
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from ..core.exceptions import InvalidResourceError

if TYPE_CHECKING:
    from ..services.models import DBInstance


MULTI_AZ = 'MultiAZ'
SINGLE_AZ = 'SingleAZ'


def get_instance_class_family(instance_class: str) -> str:
    """Strip the size token: ``db.r5.large`` -> ``db.r5``."""
    parts = instance_class.split('.')
    if len(parts) < 3 or parts[0] != 'db' or not all(parts):
        raise InvalidResourceError(f"Invalid DB instance class: {instance_class}")
    return '.'.join(parts[:-1])


def build_group_key(instance_class: str, description: str, multi_az: bool) -> str:
    return '/'.join([
        get_instance_class_family(instance_class),
        description,
        MULTI_AZ if multi_az else SINGLE_AZ,
    ])


class EngineDescriptionMapping:
    """Maps a DB instance's engine name to a reservation's product description.

    The two names come from different APIs. Without overrides they are
    assumed to be equal, which holds for engines such as ``mysql``; engines
    whose vocabularies differ (e.g. ``postgres`` vs ``postgresql``) must be
    configured explicitly.
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None):
        self.overrides: Dict[str, str] = dict(overrides or {})

    def __call__(self, engine: str) -> str:
        return self.overrides.get(engine, engine)


def get_group_key_from_db_instance(
    instance: 'DBInstance',
    mapping: Optional[EngineDescriptionMapping] = None,
) -> str:
    description_for = mapping or EngineDescriptionMapping()
    return build_group_key(instance.instance_class, description_for(instance.engine), instance.multi_az)


def get_group_key_from_reserved_db_instance(instance_class: str, product_description: str, multi_az: bool) -> str:
    return build_group_key(instance_class, product_description, multi_az)
