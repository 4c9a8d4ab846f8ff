"""
Reference tables of Bioconductor packages by array platform.

Which package reads and preprocesses raw data depends on the array vendor.
The tables below list the usual choices for Affymetrix, Illumina and
Nimblegen arrays together with what has to be in place before installing them.
Downstream analysis (``limma``) is the same for all platforms.
"""

from __future__ import annotations
import warnings
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple
import pandas as pd

from .r_utils import ensure_r_dependencies


@dataclass(frozen=True)
class PlatformPackage:
    """A Bioconductor package used to process data of one array platform.

    Attributes:
        name: R package name.
        description: Package title.
        prerequisites: R packages installed before this one.
        system_requirements: Software outside R that the package needs.
    """
    name: str
    description: str
    prerequisites: Tuple[str, ...] = ()
    system_requirements: Tuple[str, ...] = ()


PLATFORMS = ("Affymetrix", "Illumina", "Nimblegen")

PLATFORM_PACKAGES: Dict[str, Tuple[PlatformPackage, ...]] = {
    "Affymetrix": (
        PlatformPackage(
            "affy",
            "Methods for Affymetrix Oligonucleotide Arrays",
            ("Biobase", "affyio", "preprocessCore"),
        ),
        PlatformPackage(
            "affyio",
            "Tools for parsing Affymetrix data files",
        ),
        PlatformPackage(
            "affyPLM",
            "Methods for fitting probe-level models",
            ("affy", "gcrma", "preprocessCore"),
        ),
        PlatformPackage(
            "gcrma",
            "Background Adjustment Using Sequence Information",
            ("affy", "Biostrings"),
        ),
        PlatformPackage(
            "makecdfenv",
            "CDF Environment Maker",
            ("affy", "affyio"),
        ),
        PlatformPackage(
            "affycoretools",
            "Functions useful for those doing repetitive analyses with Affymetrix GeneChips",
            ("affy", "limma"),
        ),
        PlatformPackage(
            "oligo",
            "Preprocessing tools for oligonucleotide arrays (Gene and Exon ST arrays)",
            ("Biobase", "oligoClasses", "preprocessCore"),
        ),
        PlatformPackage(
            "xps",
            "Processing and Analysis of Affymetrix Oligonucleotide Arrays including "
            "Exon Arrays, Whole Genome Arrays and Plate Arrays",
            (),
            ("ROOT (https://root.cern) built and on the library path",),
        ),
    ),
    "Illumina": (
        PlatformPackage(
            "beadarray",
            "Quality assessment and low-level analysis for Illumina BeadArray data",
            ("BeadDataPackR", "limma", "illuminaio"),
        ),
        PlatformPackage(
            "BeadDataPackR",
            "Compression of Illumina BeadArray data",
        ),
        PlatformPackage(
            "illuminaio",
            "Parsing Illumina Microarray Output Files",
        ),
        PlatformPackage(
            "lumi",
            "BeadArray Specific Methods for Illumina Methylation and Expression Microarrays",
            ("affy", "methylumi", "limma"),
        ),
        PlatformPackage(
            "limma",
            "Linear Models for Microarray Data (read.ilmn / neqc for BeadStudio output)",
        ),
    ),
    "Nimblegen": (
        PlatformPackage(
            "oligo",
            "Preprocessing tools for oligonucleotide arrays (reads XYS files)",
            ("Biobase", "oligoClasses", "preprocessCore"),
        ),
        PlatformPackage(
            "pdInfoBuilder",
            "Platform Design Information Package Builder",
            ("oligo", "RSQLite"),
            ("NimbleGen NDF and XYS design files for the array",),
        ),
        PlatformPackage(
            "Ringo",
            "R Investigation of ChIP-chip Oligoarrays",
            ("Biobase", "limma"),
        ),
    ),
}


def _resolve_platform(platform: str) -> str:
    for name in PLATFORMS:
        if name.lower() == str(platform).strip().lower():
            return name
    raise KeyError(f"Unknown platform '{platform}'. Known platforms: {list(PLATFORMS)}")


def packages_for_platform(platform: str) -> Tuple[PlatformPackage, ...]:
    """Return the packages listed for ``platform`` (case-insensitive)."""
    return PLATFORM_PACKAGES[_resolve_platform(platform)]


def platform_table(platform: Optional[str] = None) -> pd.DataFrame:
    """
    Return the package table for one platform, or all platforms stacked.

    Columns: platform, package, description, prerequisites, system_requirements
    (the last two as comma-separated strings).
    """
    names = PLATFORMS if platform is None else (_resolve_platform(platform),)
    rows = [
        {
            "platform": name,
            "package": pkg.name,
            "description": pkg.description,
            "prerequisites": ", ".join(pkg.prerequisites),
            "system_requirements": ", ".join(pkg.system_requirements),
        }
        for name in names
        for pkg in PLATFORM_PACKAGES[name]
    ]
    return pd.DataFrame(
        rows,
        columns=["platform", "package", "description", "prerequisites", "system_requirements"],
    )


def to_markdown(platform: str) -> str:
    """Render the package table of ``platform`` as a markdown table."""
    lines = [
        "| Package | Description | Prerequisites |",
        "|---|---|---|",
    ]
    for pkg in packages_for_platform(platform):
        prereq = list(pkg.prerequisites) + list(pkg.system_requirements)
        lines.append(
            f"| {pkg.name} | {pkg.description} | {', '.join(prereq) if prereq else 'none'} |"
        )
    return "\n".join(lines)


def install_platform_packages(
    platform: str,
    packages: Optional[Sequence[str]] = None,
) -> list:
    """
    Install the R packages listed for a platform, prerequisites first.

    Args:
        platform: Platform name (case-insensitive).
        packages: Subset of the platform's packages. Default: all of them.

    Returns:
        The R packages passed to the installer, in installation order.

    Raises:
        KeyError: For an unknown platform or a package not listed for it.
    """
    available = {pkg.name: pkg for pkg in packages_for_platform(platform)}
    if packages is None:
        selected = list(available.values())
    else:
        unknown = [p for p in packages if p not in available]
        if unknown:
            raise KeyError(
                f"Packages {unknown} are not listed for {_resolve_platform(platform)}. "
                f"Available: {list(available)}"
            )
        selected = [available[p] for p in packages]

    order = []
    for pkg in selected:
        for name in pkg.prerequisites + (pkg.name,):
            if name not in order:
                order.append(name)
        for requirement in pkg.system_requirements:
            warnings.warn(
                f"{pkg.name} needs {requirement}, which must be installed outside R",
                stacklevel=2,
            )

    ensure_r_dependencies(order)
    return order
