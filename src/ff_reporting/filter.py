"""
Filter model shared by reporting queries.

A filter restricts one or more dimensions to a set of identifiers. Query
builders translate the restricted dimensions into SQL predicates.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Set

from pydantic import BaseModel, ConfigDict, Field


class DimensionType(str, Enum):
    """Axes a report can be filtered or aggregated on."""

    ACTIVITY = "Activity"
    ACTIVITY_CATEGORY = "ActivityCategory"
    ADMIN_LEVEL = "AdminLevel"
    ATTRIBUTE_GROUP = "AttributeGroup"
    DATABASE = "Database"
    DATE = "Date"
    INDICATOR = "Indicator"
    INDICATOR_CATEGORY = "IndicatorCategory"
    LOCATION = "Location"
    ORG_UNIT = "OrgUnit"
    PARTNER = "Partner"
    PROJECT = "Project"
    SITE = "Site"
    TARGET = "Target"


class Filter(BaseModel):
    """
    Restrictions keyed by dimension.

    Attributes:
        restrictions: Dimension -> set of identifiers the dimension is limited to
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    restrictions: Dict[DimensionType, Set[int]] = Field(default_factory=dict)

    def add_restriction(self, dimension: DimensionType, identifier: int) -> "Filter":
        self.restrictions.setdefault(dimension, set()).add(identifier)
        return self

    def add_restrictions(self, dimension: DimensionType, ids: Iterable[int]) -> "Filter":
        self.restrictions.setdefault(dimension, set()).update(ids)
        return self

    def get_restrictions(self, dimension: DimensionType) -> Set[int]:
        """Return the identifiers for a dimension, or an empty set if unrestricted."""
        return set(self.restrictions.get(dimension, set()))

    def is_restricted(self, dimension: DimensionType) -> bool:
        return bool(self.restrictions.get(dimension))

    def clear_restriction(self, dimension: DimensionType) -> None:
        self.restrictions.pop(dimension, None)

    @property
    def restricted_dimensions(self) -> List[DimensionType]:
        """Dimensions with at least one restriction, in insertion order."""
        return [dimension for dimension, ids in self.restrictions.items() if ids]

    def is_null(self) -> bool:
        """True when no dimension is restricted."""
        return not self.restricted_dimensions
