"""Tests for the platform package reference tables."""

import pytest

import microarray_workflow.platforms as platforms
from microarray_workflow import (
    PLATFORMS,
    PlatformPackage,
    packages_for_platform,
    platform_table,
    install_platform_packages,
)


def test_three_platforms():
    assert PLATFORMS == ("Affymetrix", "Illumina", "Nimblegen")


def test_every_platform_has_packages():
    for platform in PLATFORMS:
        pkgs = packages_for_platform(platform)
        assert pkgs
        assert all(isinstance(p, PlatformPackage) for p in pkgs)
        names = [p.name for p in pkgs]
        assert len(names) == len(set(names))


def test_lookup_is_case_insensitive():
    assert packages_for_platform("affymetrix") == packages_for_platform("Affymetrix")
    assert "affy" in [p.name for p in packages_for_platform(" AFFYMETRIX ")]


def test_unknown_platform():
    with pytest.raises(KeyError, match="Agilent"):
        packages_for_platform("Agilent")


def test_platform_table_columns():
    table = platform_table("Illumina")

    assert list(table.columns) == [
        "platform", "package", "description", "prerequisites", "system_requirements",
    ]
    assert set(table["platform"]) == {"Illumina"}
    assert "lumi" in table["package"].tolist()


def test_platform_table_all():
    table = platform_table()

    assert set(table["platform"]) == set(PLATFORMS)
    assert len(table) == sum(len(packages_for_platform(p)) for p in PLATFORMS)


def test_system_requirements_listed():
    xps = {p.name: p for p in packages_for_platform("Affymetrix")}["xps"]

    assert any("ROOT" in req for req in xps.system_requirements)


def test_to_markdown():
    md = platforms.to_markdown("Nimblegen")
    lines = md.splitlines()

    assert lines[0] == "| Package | Description | Prerequisites |"
    assert len(lines) == 2 + len(packages_for_platform("Nimblegen"))
    assert any(line.startswith("| oligo |") for line in lines)


class TestInstallPlatformPackages:

    @pytest.fixture
    def installed(self, monkeypatch):
        calls = []
        monkeypatch.setattr(platforms, "ensure_r_dependencies", lambda pkgs: calls.append(list(pkgs)))
        return calls

    def test_prerequisites_first(self, installed):
        order = install_platform_packages("Affymetrix", packages=["affyPLM"])

        assert order == ["affy", "gcrma", "preprocessCore", "affyPLM"]
        assert installed == [order]

    def test_no_duplicates(self, installed):
        order = install_platform_packages("Affymetrix", packages=["affy", "affyPLM"])

        assert len(order) == len(set(order))
        assert order.index("affy") < order.index("affyPLM")

    def test_warns_about_system_requirements(self, installed):
        with pytest.warns(UserWarning, match="ROOT"):
            install_platform_packages("Affymetrix", packages=["xps"])

    def test_unknown_package(self, installed):
        with pytest.raises(KeyError, match="lumi"):
            install_platform_packages("Affymetrix", packages=["lumi"])
        assert installed == []
