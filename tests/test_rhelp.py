import pytest

from conftest import r_packages_available

if not r_packages_available("limma"):
    pytest.skip("R package limma not available", allow_module_level=True)

from microarray_workflow import rhelp


def test_help_text():
    text = rhelp.help_text("topTable", package="limma")
    assert "topTable" in text
    assert "adjust.method" in text


def test_help_text_unknown_topic():
    with pytest.raises(KeyError, match="notATopic"):
        rhelp.help_text("notATopic", package="limma")


def test_help_text_unknown_package():
    with pytest.raises(KeyError, match="notAPackage"):
        rhelp.help_text("lmFit", package="notAPackage")


def test_list_vignettes():
    vignettes = rhelp.list_vignettes("limma")
    assert list(vignettes.columns) == ["package", "item", "title"]
    assert (vignettes["package"] == "limma").all()


def test_package_version():
    version = rhelp.package_version("limma")
    assert version.count(".") >= 1
