"""Canonical export configuration for the interchange exporter.

The exporter receives exactly one configuration record per document, produced
by :func:`resolve_export_configuration` from the operator's intent and the
phases of the document. No other code path sets export options.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence

EXPORT_EXTENSION: Final[str] = ".ifc.json"


class IfcVersion(StrEnum):
    IFC2X3_CV2 = "IFC2x3CV2"
    IFC4 = "IFC4"
    IFC4_RV = "IFC4RV"
    IFC4_DTV = "IFC4DTV"


class SpaceBoundaryLevel(IntEnum):
    NONE = 0
    FIRST = 1
    SECOND = 2


class SiteBasis(StrEnum):
    SHARED_COORDINATES = "shared_coordinates"
    SURVEY_POINT = "survey_point"
    PROJECT_BASE_POINT = "project_base_point"
    INTERNAL_ORIGIN = "internal_origin"


# second level boundaries are only defined for these schema versions
_SECOND_LEVEL_VERSIONS: Final[frozenset[IfcVersion]] = frozenset(
    {IfcVersion.IFC2X3_CV2, IfcVersion.IFC4}
)


@dataclass(frozen=True, slots=True)
class ExportIntent:
    """What the operator asked for; may be incomplete or inconsistent."""

    ifc_version: IfcVersion = IfcVersion.IFC2X3_CV2
    space_boundaries: SpaceBoundaryLevel = SpaceBoundaryLevel.NONE
    export_base_quantities: bool = True
    include_common_property_sets: bool = True
    include_internal_property_sets: bool = False
    phase: str | None = None
    site_basis: SiteBasis = SiteBasis.SHARED_COORDINATES


@dataclass(frozen=True, slots=True)
class ExportConfiguration:
    """Resolved option set handed to the exporter."""

    ifc_version: IfcVersion
    space_boundaries: SpaceBoundaryLevel
    export_base_quantities: bool
    include_common_property_sets: bool
    include_internal_property_sets: bool
    phase_name: str | None
    phase_index: int | None
    site_basis: SiteBasis

    def as_options(self) -> dict[str, object]:
        options: dict[str, object] = {
            "ExportBaseQuantities": self.export_base_quantities,
            "ExportIFCCommonPropertySets": self.include_common_property_sets,
            "ExportInternalPropertySets": self.include_internal_property_sets,
            "FileVersion": str(self.ifc_version),
            "SitePlacement": str(self.site_basis),
            "SpaceBoundaries": int(self.space_boundaries),
        }
        if self.phase_index is not None:
            options["ActivePhase"] = self.phase_name
            options["ActivePhaseIndex"] = self.phase_index
        return dict(sorted(options.items()))


def resolve_export_configuration(
    intent: ExportIntent,
    phases: Sequence[str],
) -> ExportConfiguration:
    """Resolve ``intent`` against the document's phases.

    - a named phase that exists is used, otherwise the last phase
    - no phases means no phase selection at all
    - second level space boundaries fall back to first level for schema
      versions that do not define them
    """

    phase_index: int | None = None
    if phases:
        if intent.phase is not None and intent.phase in phases:
            phase_index = list(phases).index(intent.phase)
        else:
            phase_index = len(phases) - 1
    phase_name = phases[phase_index] if phase_index is not None else None

    space_boundaries = intent.space_boundaries
    if (
        space_boundaries is SpaceBoundaryLevel.SECOND
        and intent.ifc_version not in _SECOND_LEVEL_VERSIONS
    ):
        space_boundaries = SpaceBoundaryLevel.FIRST

    return ExportConfiguration(
        ifc_version=intent.ifc_version,
        space_boundaries=space_boundaries,
        export_base_quantities=intent.export_base_quantities,
        include_common_property_sets=intent.include_common_property_sets,
        include_internal_property_sets=intent.include_internal_property_sets,
        phase_name=phase_name,
        phase_index=phase_index,
        site_basis=intent.site_basis,
    )


def export_file_name(source_stem: str) -> str:
    return f"{source_stem}{EXPORT_EXTENSION}"
