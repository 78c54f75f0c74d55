"""Catalog of the supported licenses and their amendments."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .errors import ParseError


class LicenseFamily(Enum):
    MIT = "MIT"
    AGPL3 = "AGPL-3.0"
    GPL3 = "GPL-3.0"
    LGPL3 = "LGPL-3.0"
    APACHE2 = "Apache-2.0"
    BSL1 = "BSL-1.0"
    UNLICENSE = "Unlicense"
    CDDL1 = "CDDL-1.0"
    EPL2 = "EPL-2.0"
    MPL2 = "MPL-2.0"
    BSD3 = "BSD-3-Clause"


class VersionAmendment(Enum):
    NONE = ""
    ONLY = "-only"
    OR_LATER = "-or-later"


class BsdAmendment(Enum):
    NONE = ""
    ATTRIBUTION = "-Attribution"
    MODIFICATION = "-Modification"
    NO_MILITARY = "-No-Military-License"


Amendment = Union[VersionAmendment, BsdAmendment]

GNU_FAMILIES = (LicenseFamily.AGPL3, LicenseFamily.GPL3, LicenseFamily.LGPL3)
FAMILY_NAMES = {
    LicenseFamily.MIT: "MIT License",
    LicenseFamily.AGPL3: "GNU Affero General Public License v3",
    LicenseFamily.GPL3: "GNU General Public License v3",
    LicenseFamily.LGPL3: "GNU Lesser General Public License v3",
    LicenseFamily.APACHE2: "Apache License 2.0",
    LicenseFamily.BSL1: "Boost Software License 1.0",
    LicenseFamily.UNLICENSE: "The Unlicense",
    LicenseFamily.CDDL1: "Common Development and Distribution License 1.0",
    LicenseFamily.EPL2: "Eclipse Public License 2.0",
    LicenseFamily.MPL2: "Mozilla Public License 2.0",
    LicenseFamily.BSD3: "BSD 3-Clause License",
}


def _amendment_kind(family: LicenseFamily) -> Optional[type]:
    if family in GNU_FAMILIES:
        return VersionAmendment
    if family is LicenseFamily.BSD3:
        return BsdAmendment
    return None


@dataclass(frozen=True)
class LicenseVariant:
    family: LicenseFamily
    amendment: Optional[Amendment] = None

    def __post_init__(self) -> None:
        kind = _amendment_kind(self.family)
        if kind is None:
            if self.amendment is not None:
                raise ValueError(f"{self.family.value} does not take an amendment")
            return
        if self.amendment is None:
            object.__setattr__(self, "amendment", kind.NONE)
        elif not isinstance(self.amendment, kind):
            raise ValueError(f"{self.amendment!r} is not a valid amendment for {self.family.value}")

    @property
    def spdx_id(self) -> str:
        suffix = self.amendment.value if self.amendment is not None else ""
        return f"{self.family.value}{suffix}"

    @property
    def is_gnu(self) -> bool:
        return self.family in GNU_FAMILIES

    def __str__(self) -> str:
        return self.spdx_id


def normalize_license_key(name: str) -> str:
    """Normalize a license selector so case and punctuation do not matter."""
    return "".join(ch for ch in name.lower() if ch.isalnum())


def _build_variants() -> Tuple[LicenseVariant, ...]:
    variants = []
    for family in LicenseFamily:
        kind = _amendment_kind(family)
        if kind is None:
            variants.append(LicenseVariant(family))
        else:
            variants.extend(LicenseVariant(family, amendment) for amendment in kind)
    return tuple(variants)


LICENSE_VARIANTS: Tuple[LicenseVariant, ...] = _build_variants()
LICENSE_MAP: Dict[str, LicenseVariant] = {
    normalize_license_key(variant.spdx_id): variant for variant in LICENSE_VARIANTS
}


def all_variants() -> Tuple[LicenseVariant, ...]:
    return LICENSE_VARIANTS


def display(variant: LicenseVariant) -> str:
    return variant.spdx_id


def resolve(identifier: str) -> LicenseVariant:
    variant = LICENSE_MAP.get(normalize_license_key(identifier))
    if variant is None:
        raise ParseError(identifier)
    return variant


def describe(variant: LicenseVariant) -> str:
    name = FAMILY_NAMES[variant.family]
    amendment = variant.amendment
    if amendment is None or not amendment.value:
        return name
    return f"{name} ({amendment.value.lstrip('-').replace('-', ' ').lower()})"
