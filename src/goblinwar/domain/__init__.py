"""Domain model and pure rules for the Goblin War battle engine.

This package hosts everything needed to resolve a battle in memory:

* Dataclasses describing armies, special units and battle records
  (see :mod:`models`).
* Enumerations used across the rules layer (see :mod:`enums`).
* Rule configuration objects (see :mod:`rules_config`).
* Pure rule functions: difficulty progression, Goblin army generation,
  tactical phases, outcome calculation and casualty application.

Nothing here touches storage; the service layer reads and writes through a
repository and hands plain dataclasses to these functions.
"""

from . import (
    casualties,
    enums,
    generator,
    models,
    outcome,
    progression,
    rules_config,
    tactics,
)

__all__ = [
    "casualties",
    "enums",
    "generator",
    "models",
    "outcome",
    "progression",
    "rules_config",
    "tactics",
]
